"""Order domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Order:
    id: str
    user_id: str
    market_id: str
    type: str  # market / limit
    side: str  # buy / sell
    outcome: str  # yes / no
    amount: Decimal  # requested notional
    # Server-computed: amount / execution price. Never taken from the caller.
    shares: Decimal
    limit_price: Decimal | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    max_slippage: Decimal = Decimal("0.05")
    filled_shares: Decimal = Decimal("0")
    avg_fill_price: Decimal | None = None
    status: str = "pending"
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    @property
    def is_filled(self) -> bool:
        return self.status == "filled"
