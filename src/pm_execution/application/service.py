# src/pm_execution/application/service.py
from src.pm_execution.engine.engine import ExecutionEngine

_engine: ExecutionEngine | None = None


def get_execution_engine() -> ExecutionEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = ExecutionEngine()
    return _engine
