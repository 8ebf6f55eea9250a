"""Pydantic schemas for pm_market API responses.

Cursor format for markets (VARCHAR PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<market_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
from decimal import Decimal

from pydantic import BaseModel

from src.pm_common.datetime_utils import iso_or_none
from src.pm_common.decimals import to_display
from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_market: Market) -> str:
    """Encode composite cursor from last market in page."""
    payload = {
        "ts": iso_or_none(last_market.created_at),
        "id": last_market.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, market_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return data["ts"], data["id"]
    except Exception:
        return None, None


# ---------------------------------------------------------------------------
# Market list item
# ---------------------------------------------------------------------------


class MarketListItem(BaseModel):
    id: str
    question: str
    category: str
    status: str
    yes_price: Decimal
    no_price: Decimal
    volume: Decimal
    volume_display: str
    end_date: str | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketListItem":
        return cls(
            id=m.id,
            question=m.question,
            category=m.category,
            status=m.status,
            yes_price=m.yes_price,
            no_price=m.no_price,
            volume=m.volume,
            volume_display=to_display(m.volume),
            end_date=iso_or_none(m.end_date),
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]
    next_cursor: str | None
    has_more: bool


# ---------------------------------------------------------------------------
# Market detail (full fields)
# ---------------------------------------------------------------------------


class MarketDetail(BaseModel):
    id: str
    question: str
    description: str | None
    category: str
    status: str
    yes_price: Decimal
    no_price: Decimal
    volume: Decimal
    volume_display: str
    liquidity: Decimal
    liquidity_display: str
    trading_fee: Decimal
    resolution_source: str | None
    end_date: str | None
    created_at: str | None
    resolved_at: str | None
    resolved_outcome: str | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            id=m.id,
            question=m.question,
            description=m.description,
            category=m.category,
            status=m.status,
            yes_price=m.yes_price,
            no_price=m.no_price,
            volume=m.volume,
            volume_display=to_display(m.volume),
            liquidity=m.liquidity,
            liquidity_display=to_display(m.liquidity),
            trading_fee=m.trading_fee,
            resolution_source=m.resolution_source,
            end_date=iso_or_none(m.end_date),
            created_at=iso_or_none(m.created_at),
            resolved_at=iso_or_none(m.resolved_at),
            resolved_outcome=m.resolved_outcome,
        )
