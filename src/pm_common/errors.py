"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: Account / Balance
  3xxx: Market
  4xxx: Order
  5xxx: Position
  9xxx: System

Every error also carries a stable ``kind`` string so callers can branch on the
failure without parsing messages or depending on numeric codes.
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    kind: str = "AppError"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 2xxx: Account / Balance ---

class InsufficientBalanceError(AppError):
    kind = "InsufficientBalance"

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            400,
        )
        self.required = required
        self.available = available


class BalanceNotFoundError(AppError):
    kind = "BalanceNotFound"

    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Balance not found for user {user_id}", 404)


class InvalidBalanceError(AppError):
    kind = "InvalidBalance"

    def __init__(self, value: Decimal) -> None:
        super().__init__(2003, f"Invalid balance amount: {value}", 400)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    kind = "MarketNotFound"

    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotActiveError(AppError):
    kind = "MarketNotActive"

    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market is not active: {market_id}", 400)


# --- 4xxx: Order ---

class InvalidOrderError(AppError):
    kind = "InvalidOrder"

    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid order: {detail}", 400)


class PriceAboveMaxError(AppError):
    kind = "PriceAboveMax"

    def __init__(self, price: Decimal, max_price: Decimal) -> None:
        super().__init__(
            4002, f"Price exceeds maximum limit: {price} > {max_price}", 400
        )
        self.price = price
        self.max_price = max_price


class PriceBelowMinError(AppError):
    kind = "PriceBelowMin"

    def __init__(self, price: Decimal, min_price: Decimal) -> None:
        super().__init__(
            4003, f"Price below minimum limit: {price} < {min_price}", 400
        )
        self.price = price
        self.min_price = min_price


class SlippageExceededError(AppError):
    kind = "SlippageExceeded"

    def __init__(self, current: Decimal, price: Decimal, max_slippage: Decimal) -> None:
        super().__init__(
            4004,
            f"Price {price} outside slippage tolerance "
            f"{max_slippage * 100:.1f}% of {current}",
            400,
        )
        self.current_price = current
        self.execution_price = price
        self.max_slippage = max_slippage


class OrderNotFoundError(AppError):
    kind = "OrderNotFound"

    def __init__(self, order_id: str) -> None:
        super().__init__(4005, f"Order not found: {order_id}", 404)


# --- 5xxx: Position ---

class InsufficientSharesError(AppError):
    kind = "InsufficientShares"

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            5001,
            f"Insufficient shares to sell: required {required}, available {available}",
            400,
        )
        self.required = required
        self.available = available


# --- 9xxx: System ---

class InternalError(AppError):
    kind = "InternalError"

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class StorageError(AppError):
    kind = "StorageError"

    def __init__(self, detail: str = "Storage operation failed") -> None:
        super().__init__(9003, detail, 500)
