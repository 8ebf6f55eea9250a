"""AccountApplicationService — thin composition layer.

Combines repository calls with schema transformations.
set_balance commits/rolls back itself; the other operations are read-only.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.application.schemas import (
    BalanceResponse,
    PositionItem,
    PositionListResponse,
)
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.decimals import ZERO, quantize
from src.pm_common.errors import BalanceNotFoundError, InvalidBalanceError

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        balance = await self._repo.get_balance(db, user_id)
        if balance is None:
            raise BalanceNotFoundError(user_id)
        return BalanceResponse.from_domain(balance)

    async def set_balance(
        self, db: AsyncSession, user_id: str, new_balance: Decimal
    ) -> BalanceResponse:
        if new_balance < ZERO:
            raise InvalidBalanceError(new_balance)
        try:
            balance = await self._repo.update_balance(db, user_id, quantize(new_balance))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Balance for user %s set to %s", user_id, balance.balance)
        return BalanceResponse.from_domain(balance)

    async def list_positions(self, db: AsyncSession, user_id: str) -> PositionListResponse:
        positions = await self._repo.list_positions(db, user_id)
        items = [PositionItem.from_domain(p) for p in positions]
        return PositionListResponse(items=items, total=len(items))
