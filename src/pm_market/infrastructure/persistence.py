"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import storage_errors
from src.pm_common.errors import MarketNotFoundError
from src.pm_market.domain.models import Market, MarketStats

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, question, description, category, status,
    end_date, resolution_source,
    yes_price, no_price, volume, liquidity, trading_fee,
    created_at, resolved_at, resolved_outcome
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

# Row lock: serializes concurrent price updates across worker processes.
_GET_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_UPDATE_QUOTE_SQL = text(f"""
    UPDATE markets
    SET yes_price = :yes_price,
        no_price = :no_price,
        volume = :volume
    WHERE id = :market_id
    RETURNING {_MARKET_COLUMNS}
""")

_STATS_SQL = text("""
    SELECT
        (SELECT COALESCE(SUM(volume), 0) FROM markets) AS total_volume,
        (SELECT COUNT(*) FROM markets WHERE status = 'active') AS active_markets,
        (SELECT COUNT(*) FROM trades) AS total_trades,
        (SELECT COUNT(*) FROM users) AS total_users
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        question=row.question,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        end_date=row.end_date,  # type: ignore[attr-defined]
        resolution_source=row.resolution_source,  # type: ignore[attr-defined]
        yes_price=row.yes_price,  # type: ignore[attr-defined]
        no_price=row.no_price,  # type: ignore[attr-defined]
        volume=row.volume,  # type: ignore[attr-defined]
        liquidity=row.liquidity,  # type: ignore[attr-defined]
        trading_fee=row.trading_fee,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
        resolved_outcome=row.resolved_outcome,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class MarketRepository:
    """Concrete repository. Only update_quote mutates, and only price/volume."""

    @storage_errors
    async def get_market_by_id(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market | None:
        sql = _GET_MARKET_FOR_UPDATE_SQL if for_update else _GET_MARKET_SQL
        result = await db.execute(sql, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    @storage_errors
    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Market]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters,
        # not an ISO string.  Parse the cursor timestamp here.
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        result = await db.execute(
            _LIST_MARKETS_SQL,
            {
                "status": status,
                "category": category,
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_market(row) for row in rows]

    @storage_errors
    async def update_quote(
        self,
        db: AsyncSession,
        market_id: str,
        yes_price: Decimal,
        no_price: Decimal,
        volume: Decimal,
    ) -> Market:
        result = await db.execute(
            _UPDATE_QUOTE_SQL,
            {
                "market_id": market_id,
                "yes_price": yes_price,
                "no_price": no_price,
                "volume": volume,
            },
        )
        row = result.fetchone()
        if row is None:
            raise MarketNotFoundError(market_id)
        return _row_to_market(row)

    @storage_errors
    async def get_stats(self, db: AsyncSession) -> MarketStats:
        row = (await db.execute(_STATS_SQL)).fetchone()
        if row is None:
            return MarketStats(Decimal("0"), 0, 0, 0)
        return MarketStats(
            total_volume=row.total_volume,
            active_markets=row.active_markets,
            total_trades=row.total_trades,
            total_users=row.total_users,
        )
