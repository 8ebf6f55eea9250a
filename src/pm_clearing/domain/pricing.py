"""AMM pricing — constant-impact quote update.

Pure functions, no I/O. Every fill moves the YES price by a fixed base impact
plus a size-dependent term that saturates at 5%. The NO price is always derived
as ``1 - yes`` so the pair sums to exactly one.
"""
from dataclasses import dataclass
from decimal import Decimal

from src.pm_common.decimals import ONE, quantize

BASE_IMPACT = Decimal("0.01")
VOLUME_DIVISOR = Decimal("1000")
MAX_VOLUME_IMPACT = Decimal("0.05")
PRICE_FLOOR = Decimal("0.05")
PRICE_CEILING = Decimal("0.95")


@dataclass(frozen=True)
class Quote:
    yes_price: Decimal
    no_price: Decimal

    def price_for(self, outcome: str) -> Decimal:
        return self.yes_price if outcome == "yes" else self.no_price


def price_impact(notional: Decimal) -> Decimal:
    """0.01 + min(notional / 1000, 0.05)."""
    return BASE_IMPACT + min(notional / VOLUME_DIVISOR, MAX_VOLUME_IMPACT)


def pushes_yes_up(outcome: str, side: str) -> bool:
    """Buying YES and selling NO both raise the YES price.

    Needs both fields: side alone or outcome alone gets the sign wrong for half
    of the four combinations.
    """
    return (outcome == "yes") == (side == "buy")


def next_price(market: object, outcome: str, side: str, notional: Decimal) -> Quote:
    """Quote after a fill of ``notional`` on ``outcome``/``side``.

    ``market`` is anything with a ``yes_price`` attribute (Market, Quote).
    """
    yes_price: Decimal = market.yes_price  # type: ignore[attr-defined]
    impact = price_impact(notional)
    if pushes_yes_up(outcome, side):
        moved = yes_price + impact
    else:
        moved = yes_price - impact
    new_yes = quantize(min(PRICE_CEILING, max(PRICE_FLOOR, moved)))
    return Quote(yes_price=new_yes, no_price=ONE - new_yes)
