"""Execution decision — whether an admitted order fills now, and at what price."""
from decimal import Decimal

from src.pm_common.decimals import ONE, shares_for
from src.pm_common.errors import (
    PriceAboveMaxError,
    PriceBelowMinError,
    SlippageExceededError,
)
from src.pm_execution.domain.models import ExecutionDecision, ExecutionPlan, Rejection
from src.pm_order.domain.models import Order


def quote_execution(order: Order, current_price: Decimal) -> tuple[bool, Decimal]:
    """Return (can_execute, execution_price) for the order type and side.

    market:     always, at the current price
    limit buy:  when current <= limit, at min(current, limit)
    limit sell: when current >= limit, at max(current, limit)
    """
    if order.type == "market":
        return True, current_price
    limit_price = order.limit_price
    if limit_price is None:
        # Admission rejects this; kept total for direct callers.
        return False, current_price
    if order.side == "buy":
        return current_price <= limit_price, min(current_price, limit_price)
    return current_price >= limit_price, max(current_price, limit_price)


def slippage_bound(side: str, current_price: Decimal, max_slippage: Decimal) -> Decimal:
    if side == "buy":
        return current_price * (ONE + max_slippage)
    return current_price * (ONE - max_slippage)


def _check_bounds(order: Order, current_price: Decimal, price: Decimal) -> None:
    if order.side == "buy" and order.max_price is not None and price > order.max_price:
        raise PriceAboveMaxError(price, order.max_price)
    if order.side == "sell" and order.min_price is not None and price < order.min_price:
        raise PriceBelowMinError(price, order.min_price)

    bound = slippage_bound(order.side, current_price, order.max_slippage)
    breached = price > bound if order.side == "buy" else price < bound
    if breached:
        raise SlippageExceededError(current_price, price, order.max_slippage)


def decide_execution(order: Order, current_price: Decimal) -> ExecutionDecision:
    """One-shot decision for ``order`` against the pinned ``current_price``.

    Bounds are only enforced when the order would execute; a resting limit
    order is never rejected for price.
    """
    can_execute, price = quote_execution(order, current_price)
    shares = shares_for(order.amount, price)
    if can_execute:
        try:
            _check_bounds(order, current_price, price)
        except (PriceAboveMaxError, PriceBelowMinError, SlippageExceededError) as err:
            return Rejection(
                current_price=current_price,
                execution_price=price,
                shares=shares,
                error=err,
            )
    return ExecutionPlan(
        current_price=current_price,
        execution_price=price,
        shares=shares,
        can_execute=can_execute,
    )
