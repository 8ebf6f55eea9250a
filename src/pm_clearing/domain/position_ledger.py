"""Position ledger — weighted-average-cost accounting per (user, market, outcome).

Buys fold the new cost into the average. Sells release cost at the *current*
average and leave the average itself untouched, so after several partial
sells ``total_cost`` can drift slightly from ``shares * avg_price``. That drift
is accepted; realized P&L per sell is ``amount - shares * avg_price`` and is
recoverable from trade history, so it is not stored.
"""
from dataclasses import dataclass
from decimal import Decimal

from src.pm_account.domain.models import Position
from src.pm_common.decimals import ZERO, quantize


@dataclass(frozen=True)
class PositionChange:
    """New (shares, avg_price, total_cost) for a position row."""

    shares: Decimal
    avg_price: Decimal
    total_cost: Decimal


def open_position(trade_shares: Decimal, price: Decimal, amount: Decimal) -> PositionChange:
    """First-ever buy for a (user, market, outcome)."""
    return PositionChange(shares=trade_shares, avg_price=price, total_cost=amount)


def increase(position: Position, trade_shares: Decimal, amount: Decimal) -> PositionChange:
    new_shares = position.shares + trade_shares
    new_total_cost = position.total_cost + amount
    if new_shares <= ZERO:
        # Only reachable when a zero-share fill hits a closed position.
        return PositionChange(ZERO, position.avg_price, ZERO)
    return PositionChange(
        shares=new_shares,
        avg_price=quantize(new_total_cost / new_shares),
        total_cost=new_total_cost,
    )


def decrease(position: Position, trade_shares: Decimal) -> PositionChange:
    new_shares = position.shares - trade_shares
    if new_shares <= ZERO:
        return PositionChange(shares=ZERO, avg_price=position.avg_price, total_cost=ZERO)
    cost_reduction = quantize(trade_shares * position.avg_price)
    return PositionChange(
        shares=new_shares,
        avg_price=position.avg_price,
        total_cost=max(ZERO, position.total_cost - cost_reduction),
    )


def realized_pnl(position: Position, trade_shares: Decimal, amount: Decimal) -> Decimal:
    """Gain (or loss) of selling ``trade_shares`` for ``amount`` against cost basis."""
    return amount - quantize(trade_shares * position.avg_price)
