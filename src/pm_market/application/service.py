"""Market read views: the paged list and one market's detail.

Quotes returned here are the last committed ones. Nothing takes a lock; the
execution engine re-reads markets ``FOR UPDATE`` before it prices an order.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import MarketStatus
from src.pm_common.errors import MarketNotFoundError
from src.pm_market.application.schemas import (
    MarketDetail,
    MarketListItem,
    MarketListResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository

ALL_STATUSES = "all"


def status_filter(status: str | None) -> str | None:
    """Tradeable markets by default; ``all`` lifts the filter."""
    if status is None:
        return MarketStatus.ACTIVE.value
    if status == ALL_STATUSES:
        return None
    return MarketStatus(status).value


def _market_page(markets: list[Market], limit: int) -> MarketListResponse:
    # ``markets`` holds up to limit+1 rows; the extra one only signals has_more.
    page = markets[:limit]
    has_more = len(markets) > limit
    return MarketListResponse(
        items=[MarketListItem.from_domain(m) for m in page],
        next_cursor=cursor_encode(page[-1]) if has_more and page else None,
        has_more=has_more,
    )


class MarketApplicationService:
    def __init__(self, repo: MarketRepositoryProtocol | None = None) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        cursor: str | None,
        limit: int,
    ) -> MarketListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        markets = await self._repo.list_markets(
            db, status_filter(status), category, cursor_ts, cursor_id, limit + 1
        )
        return _market_page(markets, limit)

    async def require_market(self, db: AsyncSession, market_id: str) -> Market:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        return MarketDetail.from_domain(await self.require_market(db, market_id))
