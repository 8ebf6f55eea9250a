# src/pm_clearing/domain/global_invariants.py
"""Ledger-wide invariant sweep over committed state."""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_PRICE_SUM_SQL = text("""
    SELECT id, yes_price, no_price FROM markets
    WHERE yes_price + no_price <> 1
""")
_NEGATIVE_BALANCE_SQL = text(
    "SELECT user_id, balance FROM user_balances WHERE balance < 0"
)
_NEGATIVE_POSITION_SQL = text("""
    SELECT id, shares, total_cost FROM positions
    WHERE shares < 0 OR total_cost < 0
""")
# Filled orders must have exactly one trade, for the same number of shares.
_FILLED_ORDER_TRADES_SQL = text("""
    SELECT o.id, o.shares, o.filled_shares,
           COUNT(t.id) AS trade_count,
           COALESCE(SUM(t.shares), 0) AS traded_shares
    FROM orders o
    LEFT JOIN trades t ON t.buy_order_id = o.id OR t.sell_order_id = o.id
    WHERE o.status = 'filled'
    GROUP BY o.id, o.shares, o.filled_shares
    HAVING COUNT(t.id) <> 1
        OR o.filled_shares <> o.shares
        OR COALESCE(SUM(t.shares), 0) <> o.filled_shares
""")


async def verify_global_invariants(db: AsyncSession) -> list[str]:
    """Re-check every settlement invariant across all rows. Returns violation strings."""
    violations: list[str] = []
    for row in (await db.execute(_PRICE_SUM_SQL)).fetchall():
        violations.append(
            f"INV-1 violated: market={row.id} yes={row.yes_price} no={row.no_price}"
        )
    for row in (await db.execute(_NEGATIVE_BALANCE_SQL)).fetchall():
        violations.append(f"INV-2 violated: user={row.user_id} balance={row.balance}")
    for row in (await db.execute(_NEGATIVE_POSITION_SQL)).fetchall():
        violations.append(
            f"INV-3 violated: position={row.id} shares={row.shares} "
            f"total_cost={row.total_cost}"
        )
    for row in (await db.execute(_FILLED_ORDER_TRADES_SQL)).fetchall():
        violations.append(
            f"INV-4 violated: order={row.id} trades={row.trade_count} "
            f"filled={row.filled_shares} shares={row.shares} traded={row.traded_shares}"
        )
    for msg in violations:
        logger.error(msg)
    return violations
