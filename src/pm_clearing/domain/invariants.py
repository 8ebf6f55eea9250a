"""Ledger invariant verification after each settlement."""

import logging

from src.pm_account.domain.models import Balance, Position
from src.pm_clearing.domain.models import Trade
from src.pm_common.decimals import ONE, ZERO
from src.pm_market.domain.models import Market
from src.pm_order.domain.models import Order

logger = logging.getLogger(__name__)


def verify_invariants_after_settlement(
    market: Market,
    balance: Balance,
    position: Position,
    order: Order,
    trade: Trade,
) -> None:
    """Verify the post-settlement invariants. Raises AssertionError if violated.

    INV-1: yes_price + no_price == 1
    INV-2: balance >= 0
    INV-3: position shares >= 0 and total_cost >= 0
    INV-4: a filled order has filled_shares == shares and exactly this trade
    """
    total = market.yes_price + market.no_price
    assert total == ONE, (
        f"INV-1 violated: market={market.id} yes={market.yes_price} + no={market.no_price} = {total}"
    )
    assert balance.balance >= ZERO, (
        f"INV-2 violated: user={balance.user_id} balance={balance.balance}"
    )
    assert position.shares >= ZERO and position.total_cost >= ZERO, (
        f"INV-3 violated: position={position.id} shares={position.shares} "
        f"total_cost={position.total_cost}"
    )
    assert order.status == "filled" and order.filled_shares == order.shares, (
        f"INV-4 violated: order={order.id} status={order.status} "
        f"filled={order.filled_shares} shares={order.shares}"
    )
    assert trade.order_id == order.id and trade.shares == order.filled_shares, (
        f"INV-4 violated: trade={trade.id} order={trade.order_id} != {order.id}"
    )

    logger.debug(
        "Invariants OK: market=%s, yes=%s, user=%s", market.id, market.yes_price, balance.user_id
    )
