"""Order admission checks, run before anything is written.

Pure over the snapshots the engine reads under its locks. The order of checks
fixes which error a caller sees when several apply: request shape first, then
market, then the user's cash, then the user's shares.
"""
from dataclasses import dataclass
from decimal import Decimal

from src.pm_account.domain.models import Balance, Position
from src.pm_market.domain.models import Market
from src.pm_order.domain.models import Order
from src.pm_risk.rules.balance_check import check_balance
from src.pm_risk.rules.market_status import check_market_active
from src.pm_risk.rules.order_fields import check_order_fields
from src.pm_risk.rules.position_check import check_shares


@dataclass(frozen=True)
class AdmittedOrder:
    """Snapshots that passed admission, plus the price pinned for the request."""

    market: Market
    balance: Balance
    current_price: Decimal


def validate_order(
    order: Order,
    market: Market | None,
    balance: Balance | None,
    position: Position | None,
) -> AdmittedOrder:
    """Run every admission rule; raise the first failure."""
    check_order_fields(order.type, order.limit_price)
    active_market = check_market_active(market, order.market_id)
    checked_balance = check_balance(order.side, order.amount, balance, order.user_id)
    current_price = active_market.price_for(order.outcome)
    check_shares(order.side, order.amount, current_price, position)
    return AdmittedOrder(
        market=active_market, balance=checked_balance, current_price=current_price
    )
