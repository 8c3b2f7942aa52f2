"""
Rocket Pool smart node state queries.

Concurrent, fail-fast aggregation of node contract state into immutable records.
"""

__version__ = "0.1.0"

from smartnode.exceptions import (
    AggregationTimeoutError,
    ContractCallError,
    FieldFetchError,
    GatingCallError,
    SmartnodeError,
)
from smartnode.fanin import FieldTask, gather_fields

# Configure structlog once at import time (quiet by default).
from smartnode.logging import configure_structlog
from smartnode.node import (
    BalanceRecord,
    NodeInfo,
    ReservationRecord,
    get_balances,
    get_reservation_details,
)

configure_structlog()

__all__ = [
    "AggregationTimeoutError",
    "BalanceRecord",
    "ContractCallError",
    "FieldFetchError",
    "FieldTask",
    "GatingCallError",
    "NodeInfo",
    "ReservationRecord",
    "SmartnodeError",
    "__version__",
    "gather_fields",
    "get_balances",
    "get_reservation_details",
]
