"""Business ID generation for orders, trades and positions.

IDs are random UUID4 hex strings with a short entity prefix so that a bare ID
in a log line identifies its table: ``ord_…``, ``trd_…``, ``pos_…``.
"""

import uuid

ORDER_PREFIX = "ord"
TRADE_PREFIX = "trd"
POSITION_PREFIX = "pos"


def generate_id(prefix: str) -> str:
    """Generate a unique prefixed ID, e.g. ``ord_3f2a…`` (36 chars)."""
    return f"{prefix}_{uuid.uuid4().hex}"
