"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class MarketStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    DISPUTED = "disputed"
    CANCELLED = "cancelled"


class MarketCategory(str, Enum):
    CRYPTO = "crypto"
    POLITICS = "politics"
    SPORTS = "sports"
    TECH = "tech"
    ENTERTAINMENT = "entertainment"


class Outcome(str, Enum):
    YES = "yes"
    NO = "no"


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    """Only PENDING -> FILLED happens inside the engine.

    CANCELLED / EXPIRED are set by external housekeeping.
    """
    PENDING = "pending"
    FILLED = "filled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
