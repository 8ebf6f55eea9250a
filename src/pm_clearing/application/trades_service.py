# src/pm_clearing/application/trades_service.py
"""Read views over the trade ledger; newest first."""
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.application.trades_schemas import TradeItem, TradeListResponse
from src.pm_clearing.infrastructure.trades_repository import TradesRepository


class TradesApplicationService:
    def __init__(self, repo: TradesRepository | None = None) -> None:
        self._repo = repo or TradesRepository()

    async def list_market_trades(
        self, db: AsyncSession, market_id: str, limit: int
    ) -> TradeListResponse:
        trades = await self._repo.list_by_market(market_id, limit, db)
        return TradeListResponse(items=[TradeItem.from_domain(t) for t in trades])

    async def list_user_trades(
        self, db: AsyncSession, user_id: str, market_id: str | None, limit: int
    ) -> TradeListResponse:
        trades = await self._repo.list_by_user(user_id, market_id, limit, db)
        return TradeListResponse(items=[TradeItem.from_domain(t) for t in trades])
