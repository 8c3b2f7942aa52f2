"""Node balances and deposit reservation details."""

from __future__ import annotations

import asyncio
from functools import partial
from typing import TYPE_CHECKING

import structlog

from smartnode.constants import (
    GET_BALANCE_ETH,
    GET_BALANCE_RPL,
    GET_DEPOSIT_RESERVATION_TIME,
    GET_DEPOSIT_RESERVE_DURATION_ID,
    GET_DEPOSIT_RESERVE_ETHER_REQUIRED,
    GET_DEPOSIT_RESERVE_RPL_REQUIRED,
    GET_DEPOSIT_RESERVED_TIME,
    GET_HAS_DEPOSIT_RESERVATION,
    ROCKET_NODE_CONTRACT,
    ROCKET_NODE_SETTINGS,
)
from smartnode.exceptions import GatingCallError
from smartnode.fanin import FieldTask, gather_fields
from smartnode.node.models import BalanceRecord, ReservationRecord
from smartnode.units import wei_to_eth

if TYPE_CHECKING:
    from smartnode.contracts import ContractCaller, ContractManager

logger = structlog.get_logger()


def _as_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return value


def _as_str(value: object) -> str:
    if isinstance(value, bytes):
        return value.rstrip(b"\x00").decode("utf-8")
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


async def get_balances(
    node_contract: ContractCaller,
    *,
    timeout: float | None = None,
) -> BalanceRecord:
    """
    Fetch a node contract's ETH and RPL balances concurrently.

    Raises:
        FieldFetchError: Either balance could not be retrieved.
    """
    logger.debug("Fetching node balances", contract=node_contract.name)
    fields = await gather_fields(
        [
            FieldTask(
                "ether_balance",
                partial(node_contract.call, GET_BALANCE_ETH),
                "node ETH balance",
                wei_to_eth,
            ),
            FieldTask(
                "rpl_balance",
                partial(node_contract.call, GET_BALANCE_RPL),
                "node RPL balance",
                wei_to_eth,
            ),
        ],
        timeout=timeout,
    )
    return BalanceRecord(**fields)


async def get_reservation_details(
    node_contract: ContractCaller,
    settings_contract: ContractCaller,
    *,
    timeout: float | None = None,
) -> ReservationRecord:
    """
    Fetch a node's deposit reservation details.

    The reservation flag is checked first; when no reservation exists the
    remaining fields are not requested. Otherwise the five reservation fields
    are fetched concurrently and the expiry is derived from the reserved time
    plus the reservation duration set on `settings_contract`.

    `timeout` is a single deadline shared by the status check and the field
    fetches.

    Raises:
        GatingCallError: The reservation status call failed.
        FieldFetchError: Any reservation field could not be retrieved.
    """
    loop = asyncio.get_running_loop()
    deadline = None if timeout is None else loop.time() + timeout
    scope = asyncio.timeout_at(deadline)
    try:
        async with scope:
            has_reservation = await node_contract.call(GET_HAS_DEPOSIT_RESERVATION)
    except Exception as e:
        cause = TimeoutError(f"timed out after {timeout}s") if scope.expired() else e
        raise GatingCallError("deposit reservation status", cause) from e

    if not has_reservation:
        logger.debug("Node has no deposit reservation", contract=node_contract.name)
        return ReservationRecord(exists=False)

    logger.debug("Fetching deposit reservation details", contract=node_contract.name)
    fields = await gather_fields(
        [
            FieldTask(
                "staking_duration_id",
                partial(node_contract.call, GET_DEPOSIT_RESERVE_DURATION_ID),
                "deposit reservation staking duration ID",
                _as_str,
            ),
            FieldTask(
                "ether_required",
                partial(node_contract.call, GET_DEPOSIT_RESERVE_ETHER_REQUIRED),
                "deposit reservation ETH requirement",
                wei_to_eth,
            ),
            FieldTask(
                "rpl_required",
                partial(node_contract.call, GET_DEPOSIT_RESERVE_RPL_REQUIRED),
                "deposit reservation RPL requirement",
                wei_to_eth,
            ),
            FieldTask(
                "reserved_time",
                partial(node_contract.call, GET_DEPOSIT_RESERVED_TIME),
                "deposit reservation reserved time",
                _as_int,
            ),
            FieldTask(
                "reservation_duration",
                partial(settings_contract.call, GET_DEPOSIT_RESERVATION_TIME),
                "node deposit reservation time setting",
                _as_int,
            ),
        ],
        timeout=None if deadline is None else max(deadline - loop.time(), 0.0),
    )

    reserved_time = fields.pop("reserved_time")
    reservation_duration = fields.pop("reservation_duration")
    return ReservationRecord(
        exists=True,
        expiry_timestamp=reserved_time + reservation_duration,
        **fields,
    )


class NodeInfo:
    """Node state queries bound to one node contract and the node settings contract."""

    def __init__(
        self,
        node_contract: ContractCaller,
        settings_contract: ContractCaller,
        timeout: float | None = None,
    ) -> None:
        self.node_contract = node_contract
        self.settings_contract = settings_contract
        self.timeout = timeout

    @classmethod
    def from_manager(
        cls,
        manager: ContractManager,
        node_contract_address: str,
        timeout: float | None = None,
    ) -> NodeInfo:
        """Resolve contract handles from a registry once, at construction."""
        return cls(
            manager.at(ROCKET_NODE_CONTRACT, node_contract_address),
            manager.get(ROCKET_NODE_SETTINGS),
            timeout=timeout,
        )

    async def balances(self) -> BalanceRecord:
        return await get_balances(self.node_contract, timeout=self.timeout)

    async def reservation(self) -> ReservationRecord:
        return await get_reservation_details(
            self.node_contract, self.settings_contract, timeout=self.timeout
        )
