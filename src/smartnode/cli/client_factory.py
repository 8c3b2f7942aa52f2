"""Factory functions for constructing node query objects in CLI commands.

Keeping construction here lets tests patch a single function instead of the
web3 and HTTP plumbing.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from smartnode.config import NodeConfig, get_config
from smartnode.contracts import ContractManager, connect
from smartnode.node import NodeInfo
from smartnode.rpc import RPCClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@asynccontextmanager
async def node_info(
    node_contract_address: str,
    *,
    config: NodeConfig | None = None,
) -> AsyncIterator[NodeInfo]:
    """Open a web3 connection and yield a `NodeInfo` for one node contract.

    Example:
        ```python
        async with node_info("0x...") as info:
            balances = await info.balances()
        ```
    """
    config = config or get_config()
    w3 = connect(config.rpc_url, timeout=config.timeout)
    try:
        manager = ContractManager(
            w3,
            config.abi_dir,
            config.contract_addresses(),
            max_retries=config.max_retries,
        )
        yield NodeInfo.from_manager(manager, node_contract_address, timeout=config.timeout)
    finally:
        await w3.provider.disconnect()


def rpc_client(*, config: NodeConfig | None = None) -> RPCClient:
    """Create an RPCClient with the configured endpoint (use as async context manager)."""
    config = config or get_config()
    return RPCClient(
        rpc_url=config.rpc_url,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )
