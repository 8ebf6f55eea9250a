"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Balance, Position


class AccountRepositoryProtocol(Protocol):
    async def get_balance(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> Balance | None: ...

    async def update_balance(
        self, db: AsyncSession, user_id: str, new_balance: Decimal
    ) -> Balance: ...

    async def get_position(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        outcome: str,
        for_update: bool = False,
    ) -> Position | None: ...

    async def create_position(self, db: AsyncSession, position: Position) -> Position: ...

    async def update_position(
        self,
        db: AsyncSession,
        position_id: str,
        shares: Decimal,
        avg_price: Decimal,
        total_cost: Decimal,
    ) -> Position: ...

    async def list_positions(self, db: AsyncSession, user_id: str) -> list[Position]: ...
