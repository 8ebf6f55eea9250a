"""AccountRepository — concrete implementation of AccountRepositoryProtocol.

Covers the two per-user ledgers: cash balances (user_balances) and
per-outcome holdings (positions).

Transaction ownership: The CALLER (application service or execution engine) is
responsible for starting and committing the transaction. Reads taken with
``for_update=True`` hold a row lock until that transaction ends.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Balance, Position
from src.pm_common.database import storage_errors
from src.pm_common.errors import BalanceNotFoundError, InternalError

# ---------------------------------------------------------------------------
# SQL: balances
# ---------------------------------------------------------------------------

_GET_BALANCE_SQL = text("""
    SELECT user_id, balance, updated_at
    FROM user_balances
    WHERE user_id = :user_id
""")

_GET_BALANCE_FOR_UPDATE_SQL = text("""
    SELECT user_id, balance, updated_at
    FROM user_balances
    WHERE user_id = :user_id
    FOR UPDATE
""")

_UPDATE_BALANCE_SQL = text("""
    UPDATE user_balances
    SET balance = :balance
    WHERE user_id = :user_id
    RETURNING user_id, balance, updated_at
""")

# ---------------------------------------------------------------------------
# SQL: positions
# ---------------------------------------------------------------------------

_POSITION_COLUMNS = """
    id, user_id, market_id, outcome,
    shares, avg_price, total_cost,
    created_at, updated_at
"""

_GET_POSITION_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE user_id = :user_id AND market_id = :market_id AND outcome = :outcome
""")

_GET_POSITION_FOR_UPDATE_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE user_id = :user_id AND market_id = :market_id AND outcome = :outcome
    FOR UPDATE
""")

_INSERT_POSITION_SQL = text(f"""
    INSERT INTO positions (id, user_id, market_id, outcome, shares, avg_price, total_cost)
    VALUES (:id, :user_id, :market_id, :outcome, :shares, :avg_price, :total_cost)
    RETURNING {_POSITION_COLUMNS}
""")

_UPDATE_POSITION_SQL = text(f"""
    UPDATE positions
    SET shares = :shares,
        avg_price = :avg_price,
        total_cost = :total_cost
    WHERE id = :id
    RETURNING {_POSITION_COLUMNS}
""")

_LIST_POSITIONS_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE user_id = :user_id
    ORDER BY updated_at DESC, id DESC
""")


def _row_to_balance(row: object) -> Balance:
    return Balance(
        user_id=row.user_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_position(row: object) -> Position:
    return Position(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        outcome=row.outcome,  # type: ignore[attr-defined]
        shares=row.shares,  # type: ignore[attr-defined]
        avg_price=row.avg_price,  # type: ignore[attr-defined]
        total_cost=row.total_cost,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository — every statement targets a single row by key."""

    @storage_errors
    async def get_balance(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> Balance | None:
        sql = _GET_BALANCE_FOR_UPDATE_SQL if for_update else _GET_BALANCE_SQL
        result = await db.execute(sql, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_balance(row) if row else None

    @storage_errors
    async def update_balance(
        self, db: AsyncSession, user_id: str, new_balance: Decimal
    ) -> Balance:
        result = await db.execute(
            _UPDATE_BALANCE_SQL, {"user_id": user_id, "balance": new_balance}
        )
        row = result.fetchone()
        if row is None:
            raise BalanceNotFoundError(user_id)
        return _row_to_balance(row)

    @storage_errors
    async def get_position(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        outcome: str,
        for_update: bool = False,
    ) -> Position | None:
        sql = _GET_POSITION_FOR_UPDATE_SQL if for_update else _GET_POSITION_SQL
        result = await db.execute(
            sql, {"user_id": user_id, "market_id": market_id, "outcome": outcome}
        )
        row = result.fetchone()
        return _row_to_position(row) if row else None

    @storage_errors
    async def create_position(self, db: AsyncSession, position: Position) -> Position:
        result = await db.execute(
            _INSERT_POSITION_SQL,
            {
                "id": position.id,
                "user_id": position.user_id,
                "market_id": position.market_id,
                "outcome": position.outcome,
                "shares": position.shares,
                "avg_price": position.avg_price,
                "total_cost": position.total_cost,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Position insert returned no rows — this should never happen")
        return _row_to_position(row)

    @storage_errors
    async def update_position(
        self,
        db: AsyncSession,
        position_id: str,
        shares: Decimal,
        avg_price: Decimal,
        total_cost: Decimal,
    ) -> Position:
        result = await db.execute(
            _UPDATE_POSITION_SQL,
            {
                "id": position_id,
                "shares": shares,
                "avg_price": avg_price,
                "total_cost": total_cost,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Position {position_id} vanished during update")
        return _row_to_position(row)

    @storage_errors
    async def list_positions(self, db: AsyncSession, user_id: str) -> list[Position]:
        result = await db.execute(_LIST_POSITIONS_SQL, {"user_id": user_id})
        return [_row_to_position(row) for row in result.fetchall()]
