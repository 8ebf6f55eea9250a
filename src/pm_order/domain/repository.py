# src/pm_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer."""
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def save(self, order: Order, db: AsyncSession) -> Order: ...

    async def get_by_id(self, order_id: str, db: AsyncSession) -> Order | None: ...

    async def update_fill(
        self,
        order_id: str,
        status: str,
        filled_shares: Decimal,
        avg_fill_price: Decimal | None,
        db: AsyncSession,
    ) -> Order: ...

    async def list_by_user(
        self,
        user_id: str,
        market_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]: ...

    async def list_by_market(
        self,
        market_id: str,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]: ...
