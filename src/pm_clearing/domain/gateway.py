# src/pm_clearing/domain/gateway.py
"""LedgerGateway Protocol — the storage contract consumed by the execution engine.

Every operation is keyed and returns the full updated record. Implementations
give single-record atomicity only; multi-record atomicity comes from the
caller's transaction (see settlement.apply_settlement). Connectivity and
constraint failures surface as StorageError.
"""
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Balance, Position
from src.pm_clearing.domain.models import Trade
from src.pm_market.domain.models import Market
from src.pm_order.domain.models import Order


class LedgerGatewayProtocol(Protocol):
    async def get_market(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market | None: ...

    async def update_market(
        self,
        db: AsyncSession,
        market_id: str,
        *,
        yes_price: Decimal,
        no_price: Decimal,
        volume: Decimal,
    ) -> Market: ...

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
        *,
        shares: Decimal,
        avg_price: Decimal,
        total_cost: Decimal,
    ) -> Position: ...

    async def create_order(self, db: AsyncSession, order: Order) -> Order: ...

    async def update_order(
        self,
        db: AsyncSession,
        order_id: str,
        *,
        status: str,
        filled_shares: Decimal,
        avg_fill_price: Decimal | None,
    ) -> Order: ...

    async def create_trade(self, db: AsyncSession, trade: Trade) -> Trade: ...
