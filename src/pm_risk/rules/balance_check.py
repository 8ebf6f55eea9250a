from decimal import Decimal

from src.pm_account.domain.models import Balance
from src.pm_common.errors import BalanceNotFoundError, InsufficientBalanceError


def check_balance(
    side: str, amount: Decimal, balance: Balance | None, user_id: str
) -> Balance:
    """Buy orders must be fully covered by cash. Sells only need the row to exist."""
    if balance is None:
        raise BalanceNotFoundError(user_id)
    if side == "buy" and balance.balance < amount:
        raise InsufficientBalanceError(amount, balance.balance)
    return balance
