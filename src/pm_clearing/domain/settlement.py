"""Order settlement — stage every write of a fill, then apply them as one unit.

``stage_settlement`` is pure: it takes the snapshots read under the engine's
locks and computes the complete set of new rows. ``apply_settlement`` writes
that batch inside a savepoint; any failure rolls back all five writes
(trade, balance, position, market, order) together.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Balance, Position
from src.pm_clearing.domain import position_ledger
from src.pm_clearing.domain.gateway import LedgerGatewayProtocol
from src.pm_clearing.domain.invariants import verify_invariants_after_settlement
from src.pm_clearing.domain.models import Trade
from src.pm_clearing.domain.position_ledger import PositionChange
from src.pm_clearing.domain.pricing import Quote, next_price
from src.pm_common.decimals import ZERO
from src.pm_common.enums import OrderStatus
from src.pm_common.errors import InsufficientBalanceError, InsufficientSharesError
from src.pm_common.id_generator import POSITION_PREFIX, TRADE_PREFIX, generate_id
from src.pm_market.domain.models import Market
from src.pm_order.domain.models import Order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementBatch:
    order: Order
    execution_price: Decimal
    shares: Decimal
    trade: Trade
    new_balance: Decimal
    # Exactly one of new_position / position_update is set.
    new_position: Position | None
    position_update: tuple[str, PositionChange] | None
    quote: Quote
    new_volume: Decimal


@dataclass(frozen=True)
class SettlementResult:
    order: Order
    trade: Trade
    balance: Balance
    position: Position
    market: Market


def stage_settlement(
    order: Order,
    execution_price: Decimal,
    shares: Decimal,
    market: Market,
    balance: Balance,
    position: Position | None,
) -> SettlementBatch:
    """Compute every row change for one fill. No I/O.

    ``position`` must be the settlement-time snapshot: the sell-side share check
    here is the second one, against the price this fill actually executes at.
    """
    amount = order.amount
    if order.side == "buy":
        if balance.balance < amount:
            raise InsufficientBalanceError(amount, balance.balance)
        new_balance = balance.balance - amount
        trade = Trade(
            id=generate_id(TRADE_PREFIX),
            market_id=order.market_id,
            outcome=order.outcome,
            shares=shares,
            price=execution_price,
            amount=amount,
            buy_order_id=order.id,
            buyer_id=order.user_id,
        )
        if position is None:
            change = position_ledger.open_position(shares, execution_price, amount)
            new_position: Position | None = Position(
                id=generate_id(POSITION_PREFIX),
                user_id=order.user_id,
                market_id=order.market_id,
                outcome=order.outcome,
                shares=change.shares,
                avg_price=change.avg_price,
                total_cost=change.total_cost,
            )
            position_update = None
        else:
            new_position = None
            position_update = (position.id, position_ledger.increase(position, shares, amount))
    else:
        held = position.shares if position is not None else ZERO
        if position is None or held < shares:
            raise InsufficientSharesError(shares, held)
        new_balance = balance.balance + amount
        trade = Trade(
            id=generate_id(TRADE_PREFIX),
            market_id=order.market_id,
            outcome=order.outcome,
            shares=shares,
            price=execution_price,
            amount=amount,
            sell_order_id=order.id,
            seller_id=order.user_id,
        )
        new_position = None
        position_update = (position.id, position_ledger.decrease(position, shares))

    return SettlementBatch(
        order=order,
        execution_price=execution_price,
        shares=shares,
        trade=trade,
        new_balance=new_balance,
        new_position=new_position,
        position_update=position_update,
        quote=next_price(market, order.outcome, order.side, amount),
        new_volume=market.volume + amount,
    )


async def apply_settlement(
    batch: SettlementBatch,
    gateway: LedgerGatewayProtocol,
    db: AsyncSession,
) -> SettlementResult:
    """Write the staged batch atomically (savepoint); all-or-nothing."""
    order = batch.order
    async with db.begin_nested():
        trade = await gateway.create_trade(db, batch.trade)
        balance = await gateway.update_balance(db, order.user_id, batch.new_balance)
        if batch.new_position is not None:
            position = await gateway.create_position(db, batch.new_position)
        else:
            assert batch.position_update is not None
            position_id, change = batch.position_update
            position = await gateway.update_position(
                db,
                position_id,
                shares=change.shares,
                avg_price=change.avg_price,
                total_cost=change.total_cost,
            )
        market = await gateway.update_market(
            db,
            order.market_id,
            yes_price=batch.quote.yes_price,
            no_price=batch.quote.no_price,
            volume=batch.new_volume,
        )
        filled = await gateway.update_order(
            db,
            order.id,
            status=OrderStatus.FILLED.value,
            filled_shares=batch.shares,
            avg_fill_price=batch.execution_price,
        )
        verify_invariants_after_settlement(market, balance, position, filled, trade)

    logger.debug(
        "Settled order=%s trade=%s yes=%s no=%s",
        filled.id, trade.id, market.yes_price, market.no_price,
    )
    return SettlementResult(
        order=filled, trade=trade, balance=balance, position=position, market=market
    )
