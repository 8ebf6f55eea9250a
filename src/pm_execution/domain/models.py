"""Execution decision outcomes.

``decide_execution`` returns exactly one of these, and the engine branches on
the type, so a failed bound check cannot fall through to settlement.
"""
from dataclasses import dataclass
from decimal import Decimal

from src.pm_common.errors import AppError


@dataclass(frozen=True)
class ExecutionPlan:
    """Order passed every check. ``can_execute`` False means a resting limit order."""

    current_price: Decimal
    execution_price: Decimal
    shares: Decimal
    can_execute: bool


@dataclass(frozen=True)
class Rejection:
    """Order is persisted as pending but must not settle; ``error`` goes to the caller."""

    current_price: Decimal
    execution_price: Decimal
    shares: Decimal
    error: AppError


ExecutionDecision = ExecutionPlan | Rejection
