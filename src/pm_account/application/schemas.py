"""Pydantic schemas for pm_account API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.pm_account.domain.models import Balance, Position
from src.pm_common.datetime_utils import iso_or_none
from src.pm_common.decimals import to_display

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SetBalanceRequest(BaseModel):
    # Sign is checked by the service so a negative value maps to InvalidBalance.
    balance: Decimal = Field(..., decimal_places=8, description="New cash balance")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    balance: Decimal
    balance_display: str
    updated_at: str | None

    @classmethod
    def from_domain(cls, b: Balance) -> "BalanceResponse":
        return cls(
            user_id=b.user_id,
            balance=b.balance,
            balance_display=to_display(b.balance),
            updated_at=iso_or_none(b.updated_at),
        )


class PositionItem(BaseModel):
    id: str
    market_id: str
    outcome: str
    shares: Decimal
    avg_price: Decimal
    total_cost: Decimal
    total_cost_display: str
    closed: bool

    @classmethod
    def from_domain(cls, p: Position) -> "PositionItem":
        return cls(
            id=p.id,
            market_id=p.market_id,
            outcome=p.outcome,
            shares=p.shares,
            avg_price=p.avg_price,
            total_cost=p.total_cost,
            total_cost_display=to_display(p.total_cost),
            closed=p.is_closed,
        )


class PositionListResponse(BaseModel):
    items: list[PositionItem]
    total: int
