"""Exact decimal arithmetic for prices, amounts and share counts.

All prices, notionals, balances and shares are ``decimal.Decimal``; binary
floats never enter the ledger. Storage scale is 8 fractional digits for every
quantity (NUMERIC(20,8) / NUMERIC(10,8)).
"""

from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Decimal

SCALE = Decimal("0.00000001")
ZERO = Decimal("0")
ONE = Decimal("1")


def quantize(value: Decimal) -> Decimal:
    """Round to storage scale (banker's rounding)."""
    return value.quantize(SCALE, rounding=ROUND_HALF_EVEN)


def quantize_down(value: Decimal) -> Decimal:
    """Truncate to storage scale; never rounds a quantity up."""
    return value.quantize(SCALE, rounding=ROUND_DOWN)


def shares_for(amount: Decimal, price: Decimal) -> Decimal:
    """Shares bought or sold for notional ``amount`` at ``price``.

    Truncated so a fill can never exceed what the notional pays for.
    """
    if price <= ZERO:
        raise ValueError(f"Price must be positive, got {price}")
    return quantize_down(amount / price)


def to_display(value: Decimal) -> str:
    """Convert an amount to a display string: 1234.5 -> '$1,234.50', -12 -> '-$12.00'."""
    rounded = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)
    if rounded < 0:
        return f"-${-rounded:,.2f}"
    return f"${rounded:,.2f}"
