"""Clearing domain models — pure dataclasses."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Trade:
    """Immutable fill against the AMM.

    There is no counterparty row: exactly one of buyer_id / seller_id is set,
    matching the side of the order that produced it.
    """

    id: str
    market_id: str
    outcome: str
    shares: Decimal
    price: Decimal
    amount: Decimal
    buy_order_id: str | None = None
    sell_order_id: str | None = None
    buyer_id: str | None = None
    seller_id: str | None = None
    created_at: datetime | None = None

    @property
    def order_id(self) -> str | None:
        return self.buy_order_id or self.sell_order_id

    @property
    def side(self) -> str:
        return "buy" if self.buyer_id is not None else "sell"
