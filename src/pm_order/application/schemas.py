# src/pm_order/application/schemas.py
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from config.settings import settings
from src.pm_clearing.domain.models import Trade
from src.pm_common.enums import OrderSide, OrderType, Outcome
from src.pm_order.domain.models import Order


class PlaceOrderRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    market_id: str = Field(..., min_length=1)
    type: OrderType
    side: OrderSide
    outcome: Outcome
    amount: Decimal = Field(..., gt=0, decimal_places=8)
    limit_price: Decimal | None = Field(None, gt=0, le=1)
    min_price: Decimal | None = Field(None, gt=0, le=1)
    max_price: Decimal | None = Field(None, gt=0, le=1)
    max_slippage: Decimal = Field(
        default_factory=lambda: settings.DEFAULT_MAX_SLIPPAGE, ge=0, le=1
    )
    # Accepted for client compatibility; the server always recomputes shares.
    shares: Decimal | None = None


class OrderResponse(BaseModel):
    id: str
    user_id: str
    market_id: str
    type: str
    side: str
    outcome: str
    amount: Decimal
    shares: Decimal
    limit_price: Decimal | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    max_slippage: Decimal
    filled_shares: Decimal
    avg_fill_price: Decimal | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            market_id=order.market_id,
            type=order.type,
            side=order.side,
            outcome=order.outcome,
            amount=order.amount,
            shares=order.shares,
            limit_price=order.limit_price,
            min_price=order.min_price,
            max_price=order.max_price,
            max_slippage=order.max_slippage,
            filled_shares=order.filled_shares,
            avg_fill_price=order.avg_fill_price,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class TradeResponse(BaseModel):
    id: str
    market_id: str
    side: str
    outcome: str
    shares: Decimal
    price: Decimal
    amount: Decimal
    buy_order_id: str | None = None
    sell_order_id: str | None = None
    buyer_id: str | None = None
    seller_id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, trade: Trade) -> "TradeResponse":
        return cls(
            id=trade.id,
            market_id=trade.market_id,
            side=trade.side,
            outcome=trade.outcome,
            shares=trade.shares,
            price=trade.price,
            amount=trade.amount,
            buy_order_id=trade.buy_order_id,
            sell_order_id=trade.sell_order_id,
            buyer_id=trade.buyer_id,
            seller_id=trade.seller_id,
            created_at=trade.created_at,
        )


class PlaceOrderResponse(BaseModel):
    order: OrderResponse
    trade: TradeResponse | None
    executed: bool
    execution_price: Decimal | None
    message: str


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
