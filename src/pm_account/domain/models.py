"""Domain models for pm_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Balance:
    user_id: str
    balance: Decimal          # cash, never negative
    updated_at: datetime | None = None


@dataclass
class Position:
    """Holding of one outcome in one market: keyed by (user_id, market_id, outcome)."""

    id: str
    user_id: str
    market_id: str
    outcome: str              # yes / no
    shares: Decimal
    avg_price: Decimal        # weighted average entry price
    total_cost: Decimal       # cost basis still held; may drift from shares * avg_price
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_closed(self) -> bool:
        return self.shares == 0
