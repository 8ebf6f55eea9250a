# src/pm_clearing/infrastructure/trades_repository.py
"""Trades persistence — one insert per executed order, plus read views."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.models import Trade
from src.pm_common.database import storage_errors
from src.pm_common.errors import InternalError

_COLUMNS = """
    id, market_id, outcome, shares, price, amount,
    buy_order_id, sell_order_id, buyer_id, seller_id, created_at
"""

_INSERT_TRADE_SQL = text(f"""
    INSERT INTO trades (
        id, market_id, outcome, shares, price, amount,
        buy_order_id, sell_order_id, buyer_id, seller_id
    ) VALUES (
        :id, :market_id, :outcome, :shares, :price, :amount,
        :buy_order_id, :sell_order_id, :buyer_id, :seller_id
    )
    RETURNING {_COLUMNS}
""")

_LIST_BY_MARKET_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM trades
    WHERE market_id = :market_id
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM trades
    WHERE (buyer_id = :user_id OR seller_id = :user_id)
      AND (CAST(:market_id AS TEXT) IS NULL OR market_id = :market_id)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


def _row_to_trade(row: Any) -> Trade:
    return Trade(
        id=row.id,
        market_id=row.market_id,
        outcome=row.outcome,
        shares=row.shares,
        price=row.price,
        amount=row.amount,
        buy_order_id=row.buy_order_id,
        sell_order_id=row.sell_order_id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        created_at=row.created_at,
    )


class TradesRepository:
    @storage_errors
    async def save(self, trade: Trade, db: AsyncSession) -> Trade:
        result = await db.execute(
            _INSERT_TRADE_SQL,
            {
                "id": trade.id,
                "market_id": trade.market_id,
                "outcome": trade.outcome,
                "shares": trade.shares,
                "price": trade.price,
                "amount": trade.amount,
                "buy_order_id": trade.buy_order_id,
                "sell_order_id": trade.sell_order_id,
                "buyer_id": trade.buyer_id,
                "seller_id": trade.seller_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Trade insert returned no rows — this should never happen")
        return _row_to_trade(row)

    @storage_errors
    async def list_by_market(
        self, market_id: str, limit: int, db: AsyncSession
    ) -> list[Trade]:
        rows = (
            await db.execute(_LIST_BY_MARKET_SQL, {"market_id": market_id, "limit": limit})
        ).fetchall()
        return [_row_to_trade(r) for r in rows]

    @storage_errors
    async def list_by_user(
        self,
        user_id: str,
        market_id: str | None,
        limit: int,
        db: AsyncSession,
    ) -> list[Trade]:
        rows = (
            await db.execute(
                _LIST_BY_USER_SQL,
                {"user_id": user_id, "market_id": market_id, "limit": limit},
            )
        ).fetchall()
        return [_row_to_trade(r) for r in rows]
