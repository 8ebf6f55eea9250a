"""Unit-test fixtures: an in-memory ledger and a savepoint-capable fake session.

``InMemoryLedger`` implements LedgerGatewayProtocol over plain dicts, and
``FakeSession`` gives it the transaction semantics the engine relies on:
``begin_nested`` restores the ledger when the block raises, ``rollback``
restores the last committed state.
"""
import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest

from src.pm_account.domain.models import Balance, Position
from src.pm_clearing.domain.models import Trade
from src.pm_common.errors import StorageError
from src.pm_market.domain.models import Market
from src.pm_order.domain.models import Order


def make_market(**kwargs: Any) -> Market:
    defaults: dict[str, Any] = {
        "id": "mkt-1",
        "question": "Will it rain tomorrow?",
        "description": None,
        "category": "tech",
        "status": "active",
        "end_date": None,
        "resolution_source": None,
        "yes_price": Decimal("0.50"),
        "no_price": Decimal("0.50"),
        "volume": Decimal("0"),
        "liquidity": Decimal("1000"),
        "trading_fee": Decimal("0.02"),
        "created_at": datetime.now(UTC),
    }
    defaults.update(kwargs)
    return Market(**defaults)


class InMemoryLedger:
    """Dict-backed LedgerGateway. ``fail_on`` names methods that raise StorageError."""

    def __init__(self) -> None:
        self.markets: dict[str, Market] = {}
        self.balances: dict[str, Balance] = {}
        self.positions: dict[str, Position] = {}
        self.orders: dict[str, Order] = {}
        self.trades: dict[str, Trade] = {}
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    # --- seeding helpers ---

    def add_market(self, **kwargs: Any) -> Market:
        market = make_market(**kwargs)
        self.markets[market.id] = market
        return market

    def add_balance(self, user_id: str, amount: str | Decimal) -> Balance:
        balance = Balance(user_id=user_id, balance=Decimal(amount))
        self.balances[user_id] = balance
        return balance

    def add_position(
        self,
        user_id: str,
        market_id: str,
        outcome: str,
        shares: str,
        avg_price: str,
        total_cost: str,
    ) -> Position:
        position = Position(
            id=f"pos-{user_id}-{market_id}-{outcome}",
            user_id=user_id,
            market_id=market_id,
            outcome=outcome,
            shares=Decimal(shares),
            avg_price=Decimal(avg_price),
            total_cost=Decimal(total_cost),
        )
        self.positions[position.id] = position
        return position

    def find_position(self, user_id: str, market_id: str, outcome: str) -> Position | None:
        for p in self.positions.values():
            if (p.user_id, p.market_id, p.outcome) == (user_id, market_id, outcome):
                return p
        return None

    # --- snapshot / restore for FakeSession ---

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(
            {
                "markets": self.markets,
                "balances": self.balances,
                "positions": self.positions,
                "orders": self.orders,
                "trades": self.trades,
            }
        )

    def restore(self, state: dict[str, Any]) -> None:
        state = copy.deepcopy(state)
        self.markets = state["markets"]
        self.balances = state["balances"]
        self.positions = state["positions"]
        self.orders = state["orders"]
        self.trades = state["trades"]

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise StorageError(f"Storage operation failed: {name}")

    # --- LedgerGatewayProtocol ---

    async def get_market(self, db: Any, market_id: str, for_update: bool = False) -> Market | None:
        self._record("get_market")
        m = self.markets.get(market_id)
        return replace(m) if m else None

    async def update_market(
        self, db: Any, market_id: str, *, yes_price: Decimal, no_price: Decimal, volume: Decimal
    ) -> Market:
        self._record("update_market")
        m = replace(self.markets[market_id], yes_price=yes_price, no_price=no_price, volume=volume)
        self.markets[market_id] = m
        return replace(m)

    async def get_balance(self, db: Any, user_id: str, for_update: bool = False) -> Balance | None:
        self._record("get_balance")
        b = self.balances.get(user_id)
        return replace(b) if b else None

    async def update_balance(self, db: Any, user_id: str, new_balance: Decimal) -> Balance:
        self._record("update_balance")
        b = Balance(user_id=user_id, balance=new_balance)
        self.balances[user_id] = b
        return replace(b)

    async def get_position(
        self, db: Any, user_id: str, market_id: str, outcome: str, for_update: bool = False
    ) -> Position | None:
        self._record("get_position")
        p = self.find_position(user_id, market_id, outcome)
        return replace(p) if p else None

    async def create_position(self, db: Any, position: Position) -> Position:
        self._record("create_position")
        self.positions[position.id] = replace(position)
        return replace(position)

    async def update_position(
        self,
        db: Any,
        position_id: str,
        *,
        shares: Decimal,
        avg_price: Decimal,
        total_cost: Decimal,
    ) -> Position:
        self._record("update_position")
        p = replace(
            self.positions[position_id], shares=shares, avg_price=avg_price, total_cost=total_cost
        )
        self.positions[position_id] = p
        return replace(p)

    async def create_order(self, db: Any, order: Order) -> Order:
        self._record("create_order")
        self.orders[order.id] = replace(order)
        return replace(order)

    async def update_order(
        self,
        db: Any,
        order_id: str,
        *,
        status: str,
        filled_shares: Decimal,
        avg_fill_price: Decimal | None,
    ) -> Order:
        self._record("update_order")
        o = replace(
            self.orders[order_id],
            status=status,
            filled_shares=filled_shares,
            avg_fill_price=avg_fill_price,
        )
        self.orders[order_id] = o
        return replace(o)

    async def create_trade(self, db: Any, trade: Trade) -> Trade:
        self._record("create_trade")
        self.trades[trade.id] = replace(trade)
        return replace(trade)


class FakeSession:
    """Just enough of AsyncSession for code that owns a unit of work."""

    def __init__(self, ledger: InMemoryLedger) -> None:
        self._ledger = ledger
        self._committed = ledger.snapshot()
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def begin_nested(self) -> AsyncIterator[None]:
        savepoint = self._ledger.snapshot()
        try:
            yield
        except BaseException:
            self._ledger.restore(savepoint)
            raise

    async def commit(self) -> None:
        self.commits += 1
        self._committed = self._ledger.snapshot()

    async def rollback(self) -> None:
        self.rollbacks += 1
        self._ledger.restore(self._committed)


@pytest.fixture
def ledger() -> InMemoryLedger:
    ledger = InMemoryLedger()
    ledger.add_market()
    ledger.add_balance("user-1", "1000")
    return ledger


@pytest.fixture
def session(ledger: InMemoryLedger) -> FakeSession:
    return FakeSession(ledger)
