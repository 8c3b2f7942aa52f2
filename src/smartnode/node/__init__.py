"""Node state aggregation."""

from smartnode.node.info import NodeInfo, get_balances, get_reservation_details
from smartnode.node.models import BalanceRecord, ReservationRecord

__all__ = [
    "BalanceRecord",
    "NodeInfo",
    "ReservationRecord",
    "get_balances",
    "get_reservation_details",
]
