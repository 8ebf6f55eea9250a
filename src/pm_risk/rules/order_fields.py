from src.pm_common.errors import InvalidOrderError


def check_order_fields(order_type: str, limit_price: object | None) -> None:
    """Raise InvalidOrderError if a limit order arrives without its limit price."""
    if order_type == "limit" and limit_price is None:
        raise InvalidOrderError("limit order requires limit_price")
