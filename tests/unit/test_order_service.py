"""pm_order service: transaction ownership, messages and read views."""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from src.pm_common.errors import (
    InsufficientSharesError,
    OrderNotFoundError,
    PriceAboveMaxError,
    StorageError,
)
from src.pm_execution.engine.engine import ExecutionEngine
from src.pm_order.application import service as svc
from src.pm_order.application.schemas import PlaceOrderRequest
from src.pm_order.domain.models import Order

D = Decimal


def _req(**kwargs: Any) -> PlaceOrderRequest:
    defaults: dict[str, Any] = {
        "user_id": "user-1",
        "market_id": "mkt-1",
        "type": "market",
        "side": "buy",
        "outcome": "yes",
        "amount": "100",
    }
    defaults.update(kwargs)
    return PlaceOrderRequest(**defaults)


@pytest.fixture
def engine(ledger: Any) -> Any:
    engine = ExecutionEngine(gateway=ledger)
    with patch.object(svc, "get_execution_engine", return_value=engine):
        yield engine


class TestMessages:
    def test_fill_message(self) -> None:
        assert (
            svc.fill_message("buy", D("200"), "yes", D("0.5"))
            == "Successfully buy 200.0 YES shares at $0.500"
        )

    def test_pending_buy_message(self) -> None:
        assert (
            svc.pending_message("buy", D("0.4"))
            == "Limit order created. Will execute when price drops to 0.40"
        )

    def test_pending_sell_message(self) -> None:
        assert svc.pending_message("sell", D("0.6")).endswith("rises to 0.60")


class TestPlaceOrder:
    async def test_executed_order_commits(
        self, engine: Any, ledger: Any, session: Any
    ) -> None:
        resp = await svc.place_order(_req(), session)

        assert resp.executed is True
        assert resp.execution_price == D("0.50")
        assert resp.trade is not None
        assert resp.trade.shares == D("200")
        assert resp.order.status == "filled"
        assert resp.message == "Successfully buy 200.0 YES shares at $0.500"
        assert session.commits == 1
        assert session.rollbacks == 0

    async def test_shares_from_request_are_dropped(
        self, engine: Any, ledger: Any, session: Any
    ) -> None:
        resp = await svc.place_order(_req(shares="5"), session)
        assert resp.order.shares == D("200")

    async def test_pending_limit_order_is_committed(
        self, engine: Any, ledger: Any, session: Any
    ) -> None:
        resp = await svc.place_order(_req(type="limit", limit_price="0.40"), session)

        assert resp.executed is False
        assert resp.trade is None
        assert resp.execution_price is None
        assert resp.message == "Limit order created. Will execute when price drops to 0.40"
        assert session.commits == 1
        assert ledger.orders[resp.order.id].status == "pending"

    async def test_bound_rejection_commits_then_raises(
        self, engine: Any, ledger: Any, session: Any
    ) -> None:
        with pytest.raises(PriceAboveMaxError):
            await svc.place_order(_req(max_price="0.45"), session)

        assert session.commits == 1
        orders = list(ledger.orders.values())
        assert len(orders) == 1
        assert orders[0].status == "pending"
        assert orders[0].shares == D("200")
        assert ledger.trades == {}

    async def test_business_failure_rolls_back(
        self, engine: Any, ledger: Any, session: Any
    ) -> None:
        with pytest.raises(InsufficientSharesError):
            await svc.place_order(_req(side="sell"), session)
        assert session.rollbacks == 1
        assert ledger.orders == {}

    async def test_storage_failure_rolls_back_everything(
        self, engine: Any, ledger: Any, session: Any
    ) -> None:
        ledger.fail_on.add("update_order")

        with pytest.raises(StorageError):
            await svc.place_order(_req(), session)

        assert session.commits == 0
        assert session.rollbacks == 1
        assert ledger.orders == {}
        assert ledger.trades == {}
        assert ledger.balances["user-1"].balance == D("1000")
        assert ledger.markets["mkt-1"].yes_price == D("0.50")

    async def test_commit_failure_becomes_storage_error(
        self, engine: Any, ledger: Any, session: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        session.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("connection lost"))
        )

        with caplog.at_level(logging.INFO, logger="src.pm_order.application.service"):
            with pytest.raises(StorageError) as exc_info:
                await svc.place_order(_req(), session)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert exc_info.value.kind == "StorageError"
        assert session.rollbacks == 1
        assert ledger.orders == {}
        assert ledger.balances["user-1"].balance == D("1000")
        assert "Filled order=" not in caplog.text
        assert "rolled back" in caplog.text

    async def test_savepoint_failure_becomes_storage_error(
        self, engine: Any, ledger: Any, session: Any
    ) -> None:
        @asynccontextmanager
        async def _savepoint_refused() -> AsyncIterator[None]:
            raise OperationalError("SAVEPOINT sa_savepoint_1", {}, Exception("connection lost"))
            yield

        session.begin_nested = _savepoint_refused

        with pytest.raises(StorageError):
            await svc.place_order(_req(), session)

        assert session.commits == 0
        assert session.rollbacks == 1
        assert ledger.orders == {}
        assert ledger.markets["mkt-1"].yes_price == D("0.50")

    async def test_fill_logged_after_commit(
        self, engine: Any, session: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="src.pm_order.application.service"):
            resp = await svc.place_order(_req(), session)

        assert session.commits == 1
        assert f"Filled order={resp.order.id} buy" in caplog.text

    async def test_sell_fill_logs_realized_pnl(
        self, engine: Any, ledger: Any, session: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        await svc.place_order(_req(), session)

        with caplog.at_level(logging.INFO, logger="src.pm_order.application.service"):
            await svc.place_order(_req(side="sell", amount="56"), session)

        assert "realized_pnl=6" in caplog.text


def _order(order_id: str) -> Order:
    return Order(
        id=order_id, user_id="user-1", market_id="mkt-1", type="market", side="buy",
        outcome="yes", amount=D("10"), shares=D("20"),
    )


class TestReadViews:
    async def test_get_order_not_found(self) -> None:
        repo = AsyncMock()
        repo.get_by_id.return_value = None
        with patch.object(svc, "_repo", repo):
            with pytest.raises(OrderNotFoundError):
                await svc.get_order("ord-x", MagicMock())

    async def test_list_user_orders_paginates(self) -> None:
        repo = AsyncMock()
        repo.list_by_user.return_value = [_order("ord-3"), _order("ord-2"), _order("ord-1")]
        with patch.object(svc, "_repo", repo):
            page = await svc.list_user_orders("user-1", None, None, 2, None, MagicMock())

        assert [o.id for o in page.items] == ["ord-3", "ord-2"]
        assert page.has_more is True
        assert page.next_cursor == "ord-2"
        assert repo.list_by_user.call_args.kwargs["limit"] == 3

    async def test_list_market_orders_last_page(self) -> None:
        repo = AsyncMock()
        repo.list_by_market.return_value = [_order("ord-1")]
        with patch.object(svc, "_repo", repo):
            page = await svc.list_market_orders("mkt-1", 20, None, MagicMock())

        assert page.has_more is False
        assert page.next_cursor is None
