# src/pm_clearing/infrastructure/gateway.py
"""LedgerGateway — LedgerGatewayProtocol backed by the per-module SQL repositories."""
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Balance, Position
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_clearing.domain.models import Trade
from src.pm_clearing.infrastructure.trades_repository import TradesRepository
from src.pm_market.domain.models import Market
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_order.domain.models import Order
from src.pm_order.infrastructure.persistence import OrderRepository


class LedgerGateway:
    def __init__(
        self,
        markets: MarketRepository | None = None,
        accounts: AccountRepository | None = None,
        orders: OrderRepository | None = None,
        trades: TradesRepository | None = None,
    ) -> None:
        self._markets = markets or MarketRepository()
        self._accounts = accounts or AccountRepository()
        self._orders = orders or OrderRepository()
        self._trades = trades or TradesRepository()

    # --- markets ---

    async def get_market(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market | None:
        return await self._markets.get_market_by_id(db, market_id, for_update=for_update)

    async def update_market(
        self,
        db: AsyncSession,
        market_id: str,
        *,
        yes_price: Decimal,
        no_price: Decimal,
        volume: Decimal,
    ) -> Market:
        return await self._markets.update_quote(db, market_id, yes_price, no_price, volume)

    # --- balances ---

    async def get_balance(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> Balance | None:
        return await self._accounts.get_balance(db, user_id, for_update=for_update)

    async def update_balance(
        self, db: AsyncSession, user_id: str, new_balance: Decimal
    ) -> Balance:
        return await self._accounts.update_balance(db, user_id, new_balance)

    # --- positions ---

    async def get_position(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        outcome: str,
        for_update: bool = False,
    ) -> Position | None:
        return await self._accounts.get_position(
            db, user_id, market_id, outcome, for_update=for_update
        )

    async def create_position(self, db: AsyncSession, position: Position) -> Position:
        return await self._accounts.create_position(db, position)

    async def update_position(
        self,
        db: AsyncSession,
        position_id: str,
        *,
        shares: Decimal,
        avg_price: Decimal,
        total_cost: Decimal,
    ) -> Position:
        return await self._accounts.update_position(
            db, position_id, shares, avg_price, total_cost
        )

    # --- orders / trades ---

    async def create_order(self, db: AsyncSession, order: Order) -> Order:
        return await self._orders.save(order, db)

    async def update_order(
        self,
        db: AsyncSession,
        order_id: str,
        *,
        status: str,
        filled_shares: Decimal,
        avg_fill_price: Decimal | None,
    ) -> Order:
        return await self._orders.update_fill(order_id, status, filled_shares, avg_fill_price, db)

    async def create_trade(self, db: AsyncSession, trade: Trade) -> Trade:
        return await self._trades.save(trade, db)
