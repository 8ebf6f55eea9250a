"""Unit tests for staging and applying a settlement batch."""
from decimal import Decimal
from typing import Any

import pytest

from src.pm_account.domain.models import Balance
from src.pm_clearing.domain.settlement import apply_settlement, stage_settlement
from src.pm_common.errors import InsufficientBalanceError, InsufficientSharesError, StorageError
from src.pm_order.domain.models import Order

D = Decimal


def _order(**kwargs: Any) -> Order:
    defaults: dict[str, Any] = {
        "id": "ord-1", "user_id": "user-1", "market_id": "mkt-1", "type": "market",
        "side": "buy", "outcome": "yes", "amount": D("100"), "shares": D("200"),
    }
    defaults.update(kwargs)
    return Order(**defaults)


class TestStageSettlement:
    def test_buy_opens_position(self, ledger: Any) -> None:
        batch = stage_settlement(
            _order(), D("0.50"), D("200"), ledger.markets["mkt-1"],
            ledger.balances["user-1"], None,
        )
        assert batch.new_balance == D("900")
        assert batch.new_position is not None
        assert batch.new_position.shares == D("200")
        assert batch.position_update is None
        assert batch.trade.buyer_id == "user-1"
        assert batch.trade.seller_id is None
        assert batch.trade.buy_order_id == "ord-1"
        assert batch.quote.yes_price == D("0.56")
        assert batch.new_volume == D("100")

    def test_buy_existing_position_updates(self, ledger: Any) -> None:
        pos = ledger.add_position("user-1", "mkt-1", "yes", "100", "0.40", "40")
        batch = stage_settlement(
            _order(), D("0.50"), D("200"), ledger.markets["mkt-1"],
            ledger.balances["user-1"], pos,
        )
        assert batch.new_position is None
        assert batch.position_update is not None
        position_id, change = batch.position_update
        assert position_id == pos.id
        assert change.shares == D("300")
        assert change.total_cost == D("140")

    def test_sell_credits_and_decreases(self, ledger: Any) -> None:
        pos = ledger.add_position("user-1", "mkt-1", "yes", "200", "0.50", "100")
        batch = stage_settlement(
            _order(side="sell", amount=D("50"), shares=D("100")), D("0.50"), D("100"),
            ledger.markets["mkt-1"], ledger.balances["user-1"], pos,
        )
        assert batch.new_balance == D("1050")
        assert batch.trade.seller_id == "user-1"
        assert batch.trade.buyer_id is None
        assert batch.trade.sell_order_id == "ord-1"
        assert batch.position_update is not None
        assert batch.position_update[1].shares == D("100")
        assert batch.quote.yes_price < D("0.50")

    def test_sell_recheck_uses_settlement_snapshot(self, ledger: Any) -> None:
        pos = ledger.add_position("user-1", "mkt-1", "yes", "50", "0.50", "25")
        with pytest.raises(InsufficientSharesError):
            stage_settlement(
                _order(side="sell"), D("0.50"), D("200"), ledger.markets["mkt-1"],
                ledger.balances["user-1"], pos,
            )

    def test_buy_recheck_balance(self, ledger: Any) -> None:
        with pytest.raises(InsufficientBalanceError):
            stage_settlement(
                _order(amount=D("5000")), D("0.50"), D("10000"), ledger.markets["mkt-1"],
                Balance("user-1", D("10")), None,
            )


class TestApplySettlement:
    async def test_writes_all_records(self, ledger: Any, session: Any) -> None:
        order = await ledger.create_order(session, _order(shares=D("200")))
        batch = stage_settlement(
            order, D("0.50"), D("200"), ledger.markets["mkt-1"], ledger.balances["user-1"], None
        )
        result = await apply_settlement(batch, ledger, session)

        assert result.order.status == "filled"
        assert result.order.filled_shares == D("200")
        assert result.order.avg_fill_price == D("0.50")
        assert ledger.balances["user-1"].balance == D("900")
        assert ledger.markets["mkt-1"].yes_price == D("0.56")
        assert ledger.markets["mkt-1"].volume == D("100")
        assert len(ledger.trades) == 1
        assert ledger.find_position("user-1", "mkt-1", "yes") is not None

    @pytest.mark.parametrize(
        "failing", ["create_trade", "update_balance", "create_position", "update_market",
                    "update_order"],
    )
    async def test_failure_rolls_back_every_write(
        self, ledger: Any, session: Any, failing: str
    ) -> None:
        order = await ledger.create_order(session, _order(shares=D("200")))
        before = ledger.snapshot()
        batch = stage_settlement(
            order, D("0.50"), D("200"), ledger.markets["mkt-1"], ledger.balances["user-1"], None
        )
        ledger.fail_on.add(failing)

        with pytest.raises(StorageError):
            await apply_settlement(batch, ledger, session)

        assert ledger.snapshot() == before
