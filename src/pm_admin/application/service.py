# src/pm_admin/application/service.py
"""Admin application service — platform aggregates and ledger health."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.global_invariants import verify_global_invariants
from src.pm_common.decimals import to_display
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository


class AdminService:
    def __init__(self, markets: MarketRepositoryProtocol | None = None) -> None:
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()

    async def get_stats(self, db: AsyncSession) -> dict[str, Any]:
        stats = await self._markets.get_stats(db)
        return {
            "total_volume": str(stats.total_volume),
            "total_volume_display": to_display(stats.total_volume),
            "active_markets": stats.active_markets,
            "total_trades": stats.total_trades,
            "total_users": stats.total_users,
        }

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, object]:
        violations = await verify_global_invariants(db)
        return {"ok": len(violations) == 0, "violations": violations}
