from decimal import Decimal

from src.pm_account.domain.models import Position
from src.pm_common.decimals import ZERO, shares_for
from src.pm_common.errors import InsufficientSharesError


def required_shares(amount: Decimal, current_price: Decimal) -> Decimal:
    """Shares a sell of notional ``amount`` consumes at the current quote."""
    return shares_for(amount, current_price)


def check_shares(
    side: str, amount: Decimal, current_price: Decimal, position: Position | None
) -> None:
    """Raise InsufficientSharesError when a sell exceeds the held position."""
    if side != "sell":
        return
    needed = required_shares(amount, current_price)
    held = position.shares if position is not None else ZERO
    if position is None or held < needed:
        raise InsufficientSharesError(needed, held)
