# src/pm_order/application/service.py
"""Order placement and order read views.

``place_order`` owns the request transaction: the engine writes, this layer
commits or rolls back. A bound/slippage rejection is committed first (the
order stays on record as pending) and only then raised to the caller.
"""
import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import OrderStatus
from src.pm_common.errors import OrderNotFoundError, StorageError
from src.pm_common.id_generator import ORDER_PREFIX, generate_id
from src.pm_execution.application.service import get_execution_engine
from src.pm_execution.engine.engine import ExecutionResult
from src.pm_order.application.schemas import (
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    TradeResponse,
)
from src.pm_order.domain.models import Order
from src.pm_order.domain.repository import OrderRepositoryProtocol
from src.pm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)

_repo: OrderRepositoryProtocol = OrderRepository()


def fill_message(side: str, shares: Decimal, outcome: str, price: Decimal) -> str:
    return f"Successfully {side} {shares:.1f} {outcome.upper()} shares at ${price:.3f}"


def pending_message(side: str, limit_price: Decimal | None) -> str:
    direction = "drops to" if side == "buy" else "rises to"
    return f"Limit order created. Will execute when price {direction} {limit_price:.2f}"


def _log_outcome(result: ExecutionResult) -> None:
    """Log a committed order. Nothing is logged as filled before the commit."""
    order = result.order
    if result.rejection is not None:
        logger.info(
            "Order %s rejected (%s): %s",
            order.id, result.rejection.kind, result.rejection.message,
        )
    elif not result.executed or result.trade is None:
        logger.info(
            "Limit order %s resting: %s %s limit=%s current=%s",
            order.id, order.side, order.outcome, order.limit_price, result.current_price,
        )
    elif result.realized_pnl is not None:
        logger.info(
            "Filled order=%s sell %s %s @ %s realized_pnl=%s",
            order.id, result.trade.shares, order.outcome,
            result.execution_price, result.realized_pnl,
        )
    else:
        logger.info(
            "Filled order=%s %s %s %s @ %s",
            order.id, order.side, result.trade.shares, order.outcome,
            result.execution_price,
        )


def _build_place_response(result: ExecutionResult) -> PlaceOrderResponse:
    order = result.order
    if result.executed and result.trade is not None:
        return PlaceOrderResponse(
            order=OrderResponse.from_domain(order),
            trade=TradeResponse.from_domain(result.trade),
            executed=True,
            execution_price=result.execution_price,
            message=fill_message(
                order.side, result.trade.shares, order.outcome, result.execution_price
            ),
        )
    return PlaceOrderResponse(
        order=OrderResponse.from_domain(order),
        trade=None,
        executed=False,
        execution_price=None,
        message=pending_message(order.side, order.limit_price),
    )


def build_order(req: PlaceOrderRequest) -> Order:
    """Draft order from a request. ``req.shares`` is deliberately dropped."""
    now = utc_now()
    return Order(
        id=generate_id(ORDER_PREFIX),
        user_id=req.user_id,
        market_id=req.market_id,
        type=req.type.value,
        side=req.side.value,
        outcome=req.outcome.value,
        amount=req.amount,
        shares=Decimal("0"),
        limit_price=req.limit_price,
        min_price=req.min_price,
        max_price=req.max_price,
        max_slippage=req.max_slippage,
        status=OrderStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )


async def place_order(req: PlaceOrderRequest, db: AsyncSession) -> PlaceOrderResponse:
    engine = get_execution_engine()
    order = build_order(req)
    try:
        result = await engine.place_order(order, db)
        await db.commit()
    except (StorageError, SQLAlchemyError) as exc:
        await db.rollback()
        logger.exception("Order %s rolled back: storage failure", order.id)
        if isinstance(exc, StorageError):
            raise
        # SAVEPOINT and COMMIT run outside the repositories, so arrive untranslated.
        raise StorageError(f"Order {order.id} was not placed: storage failure") from exc
    except Exception:
        await db.rollback()
        raise

    _log_outcome(result)
    if result.rejection is not None:
        raise result.rejection
    return _build_place_response(result)


async def get_order(order_id: str, db: AsyncSession) -> OrderResponse:
    order = await _repo.get_by_id(order_id, db)
    if order is None:
        raise OrderNotFoundError(order_id)
    return OrderResponse.from_domain(order)


def _page(orders: list[Order], limit: int) -> OrderListResponse:
    # Callers fetch limit+1 rows to detect has_more without COUNT(*)
    has_more = len(orders) > limit
    page = orders[:limit]
    return OrderListResponse(
        items=[OrderResponse.from_domain(o) for o in page],
        next_cursor=page[-1].id if has_more and page else None,
        has_more=has_more,
    )


async def list_user_orders(
    user_id: str,
    market_id: str | None,
    status: str | None,
    limit: int,
    cursor: str | None,
    db: AsyncSession,
) -> OrderListResponse:
    orders = await _repo.list_by_user(
        user_id=user_id,
        market_id=market_id,
        status=status,
        limit=limit + 1,
        cursor_id=cursor,
        db=db,
    )
    return _page(orders, limit)


async def list_market_orders(
    market_id: str, limit: int, cursor: str | None, db: AsyncSession
) -> OrderListResponse:
    orders = await _repo.list_by_market(
        market_id=market_id, limit=limit + 1, cursor_id=cursor, db=db
    )
    return _page(orders, limit)
