# src/pm_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence implementation."""
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import storage_errors
from src.pm_common.errors import InternalError, OrderNotFoundError
from src.pm_order.domain.models import Order

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, user_id, market_id, type, side, outcome,
    amount, limit_price, min_price, max_price, max_slippage,
    shares, filled_shares, avg_fill_price, status,
    expires_at, created_at, updated_at
"""

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO orders (id, user_id, market_id, type, side, outcome,
        amount, limit_price, min_price, max_price, max_slippage,
        shares, filled_shares, status, expires_at)
    VALUES (:id, :user_id, :market_id, :type, :side, :outcome,
        :amount, :limit_price, :min_price, :max_price, :max_slippage,
        :shares, 0, :status, :expires_at)
    RETURNING {_SELECT_COLUMNS}
""")

_UPDATE_FILL_SQL = text(f"""
    UPDATE orders
    SET status = :status, filled_shares = :filled_shares,
        avg_fill_price = :avg_fill_price
    WHERE id = :id
    RETURNING {_SELECT_COLUMNS}
""")

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_LIST_USER_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE user_id = :user_id
      AND (CAST(:market_id AS TEXT) IS NULL OR market_id = :market_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL
           OR (created_at, id) < (SELECT created_at, id FROM orders WHERE id = :cursor_id))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_MARKET_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE market_id = :market_id
      AND (CAST(:cursor_id AS TEXT) IS NULL
           OR (created_at, id) < (SELECT created_at, id FROM orders WHERE id = :cursor_id))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        user_id=row.user_id,
        market_id=row.market_id,
        type=row.type,
        side=row.side,
        outcome=row.outcome,
        amount=row.amount,
        shares=row.shares,
        limit_price=row.limit_price,
        min_price=row.min_price,
        max_price=row.max_price,
        max_slippage=row.max_slippage,
        filled_shares=row.filled_shares,
        avg_fill_price=row.avg_fill_price,
        status=row.status,
        expires_at=row.expires_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    @storage_errors
    async def save(self, order: Order, db: AsyncSession) -> Order:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "user_id": order.user_id,
                "market_id": order.market_id,
                "type": order.type,
                "side": order.side,
                "outcome": order.outcome,
                "amount": order.amount,
                "limit_price": order.limit_price,
                "min_price": order.min_price,
                "max_price": order.max_price,
                "max_slippage": order.max_slippage,
                "shares": order.shares,
                "status": order.status,
                "expires_at": order.expires_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Order insert returned no rows — this should never happen")
        return _row_to_order(row)

    @storage_errors
    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    @storage_errors
    async def update_fill(
        self,
        order_id: str,
        status: str,
        filled_shares: Decimal,
        avg_fill_price: Decimal | None,
        db: AsyncSession,
    ) -> Order:
        result = await db.execute(
            _UPDATE_FILL_SQL,
            {
                "id": order_id,
                "status": status,
                "filled_shares": filled_shares,
                "avg_fill_price": avg_fill_price,
            },
        )
        row = result.fetchone()
        if row is None:
            raise OrderNotFoundError(order_id)
        return _row_to_order(row)

    @storage_errors
    async def list_by_user(
        self,
        user_id: str,
        market_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_USER_ORDERS_SQL,
            {
                "user_id": user_id,
                "market_id": market_id,
                "status": status,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_order(row) for row in result.fetchall()]

    @storage_errors
    async def list_by_market(
        self,
        market_id: str,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_MARKET_ORDERS_SQL,
            {"market_id": market_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]
