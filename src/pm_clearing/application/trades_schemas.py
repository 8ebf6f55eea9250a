# src/pm_clearing/application/trades_schemas.py
"""Pydantic schemas for trades API."""
from decimal import Decimal

from pydantic import BaseModel

from src.pm_clearing.domain.models import Trade
from src.pm_common.datetime_utils import iso_or_none


class TradeItem(BaseModel):
    id: str
    market_id: str
    order_id: str | None
    user_id: str | None
    side: str
    outcome: str
    shares: Decimal
    price: Decimal
    amount: Decimal
    executed_at: str | None

    @classmethod
    def from_domain(cls, t: Trade) -> "TradeItem":
        return cls(
            id=t.id,
            market_id=t.market_id,
            order_id=t.order_id,
            user_id=t.buyer_id or t.seller_id,
            side=t.side,
            outcome=t.outcome,
            shares=t.shares,
            price=t.price,
            amount=t.amount,
            executed_at=iso_or_none(t.created_at),
        )


class TradeListResponse(BaseModel):
    items: list[TradeItem]
