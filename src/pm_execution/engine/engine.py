"""ExecutionEngine — serialized admission, decision and settlement of AMM orders."""
import asyncio
import logging
from collections import Counter, defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.gateway import LedgerGatewayProtocol
from src.pm_clearing.domain.models import Trade
from src.pm_clearing.domain.position_ledger import realized_pnl
from src.pm_clearing.domain.settlement import apply_settlement, stage_settlement
from src.pm_clearing.infrastructure.gateway import LedgerGateway
from src.pm_common.enums import OrderStatus
from src.pm_common.errors import AppError
from src.pm_execution.domain.models import Rejection
from src.pm_execution.engine.decision import decide_execution
from src.pm_order.domain.models import Order
from src.pm_risk.validator import validate_order

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    order: Order
    current_price: Decimal
    execution_price: Decimal
    executed: bool = False
    trade: Trade | None = None
    # Set when a bound/slippage check failed after the order was persisted.
    rejection: AppError | None = None
    # Sells only: proceeds minus the cost basis released.
    realized_pnl: Decimal | None = None


class ExecutionEngine:
    """Places one order at a time per user and per market.

    Locks are always taken user first, then market, so two requests can never
    wait on each other in opposite order. Reads inside the locks also take row
    locks (``FOR UPDATE``) so separate processes sharing one database still
    serialize on the same rows.

    User locks are dropped once nobody holds or waits on them; market locks
    are kept for the life of the process.

    The engine never commits and never logs an outcome: the caller owns the
    transaction, and a fill is only a fill once it is committed.
    """

    def __init__(self, gateway: LedgerGatewayProtocol | None = None) -> None:
        self._gateway: LedgerGatewayProtocol = gateway or LedgerGateway()
        self._market_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._user_locks: dict[str, asyncio.Lock] = {}
        self._user_lock_users: Counter[str] = Counter()

    @property
    def gateway(self) -> LedgerGatewayProtocol:
        return self._gateway

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        lock = self._user_locks.setdefault(user_id, asyncio.Lock())
        self._user_lock_users[user_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._user_lock_users[user_id] -= 1
            if self._user_lock_users[user_id] == 0:
                del self._user_lock_users[user_id]
                del self._user_locks[user_id]

    async def place_order(self, order: Order, db: AsyncSession) -> ExecutionResult:
        """Main entry point.

        Raises the admission errors (nothing written) and StorageError. Bound
        and slippage failures come back as ``result.rejection`` with the order
        already persisted as pending.
        """
        async with self._user_lock(order.user_id):
            async with self._market_locks[order.market_id]:
                return await self._place_order_inner(order, db)

    async def _place_order_inner(self, order: Order, db: AsyncSession) -> ExecutionResult:
        gw = self._gateway

        # One snapshot per request; every price below derives from it.
        market = await gw.get_market(db, order.market_id, for_update=True)
        balance = await gw.get_balance(db, order.user_id, for_update=True)
        position = await gw.get_position(
            db, order.user_id, order.market_id, order.outcome, for_update=True
        )
        admitted = validate_order(order, market, balance, position)
        current_price = admitted.current_price

        decision = decide_execution(order, current_price)
        order.shares = decision.shares
        order.status = OrderStatus.PENDING.value
        saved = await gw.create_order(db, order)
        logger.debug(
            "Order %s admitted at %s: %s", saved.id, current_price, type(decision).__name__
        )

        if isinstance(decision, Rejection):
            return ExecutionResult(
                order=saved,
                current_price=current_price,
                execution_price=decision.execution_price,
                rejection=decision.error,
            )

        if not decision.can_execute:
            return ExecutionResult(
                order=saved,
                current_price=current_price,
                execution_price=decision.execution_price,
            )

        # Settlement-time share re-check runs against this snapshot.
        position = await gw.get_position(
            db, order.user_id, order.market_id, order.outcome, for_update=True
        )
        batch = stage_settlement(
            saved,
            decision.execution_price,
            decision.shares,
            admitted.market,
            admitted.balance,
            position,
        )
        settled = await apply_settlement(batch, gw, db)

        pnl = None
        if saved.side == "sell" and position is not None:
            pnl = realized_pnl(position, settled.trade.shares, saved.amount)
        return ExecutionResult(
            order=settled.order,
            current_price=current_price,
            execution_price=decision.execution_price,
            executed=True,
            trade=settled.trade,
            realized_pnl=pnl,
        )
