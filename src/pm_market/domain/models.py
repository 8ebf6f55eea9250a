"""Domain models for pm_market — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import MarketStatus


@dataclass
class Market:
    id: str
    question: str
    description: str | None
    category: str
    status: str
    end_date: datetime | None
    resolution_source: str | None
    yes_price: Decimal        # invariant: yes_price + no_price == 1
    no_price: Decimal
    volume: Decimal           # cumulative traded notional
    liquidity: Decimal
    trading_fee: Decimal
    created_at: datetime | None = None
    resolved_at: datetime | None = None
    resolved_outcome: str | None = None

    def price_for(self, outcome: str) -> Decimal:
        """Current quoted price of ``outcome`` ('yes' / 'no')."""
        return self.yes_price if outcome == "yes" else self.no_price

    @property
    def is_active(self) -> bool:
        return self.status == MarketStatus.ACTIVE


@dataclass
class MarketStats:
    total_volume: Decimal
    active_markets: int
    total_trades: int
    total_users: int
