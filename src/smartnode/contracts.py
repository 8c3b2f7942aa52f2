"""Contract call transport (web3) and the name -> contract registry."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import aiohttp
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from web3 import AsyncWeb3

from smartnode.constants import DEFAULT_MAX_RETRIES
from smartnode.exceptions import ContractCallError, ContractNotFoundError

if TYPE_CHECKING:
    from tenacity.wait import WaitBaseT
    from web3.contract import AsyncContract


logger = structlog.get_logger()

_RETRY_WAIT = wait_exponential(multiplier=0.5, min=0.5, max=10)

# Failures worth another attempt. Anything else (reverts, decode errors) is final.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientConnectionError,
    aiohttp.ServerDisconnectedError,
    ConnectionError,
    TimeoutError,
)


class ContractCaller(Protocol):
    """Anything that can call a named read-only method and return the decoded value."""

    name: str

    async def call(self, method: str, *args: Any) -> Any: ...


class Web3Contract:
    """
    `ContractCaller` backed by a web3.py async contract.

    Safe to share between concurrent tasks: each call builds its own
    function object and request.
    """

    def __init__(
        self,
        contract: AsyncContract,
        name: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_wait: WaitBaseT = _RETRY_WAIT,
    ) -> None:
        self._contract = contract
        self.name = name
        self._max_retries = max(1, max_retries)
        self._retry_wait = retry_wait

    @property
    def address(self) -> str:
        return str(self._contract.address)

    def __repr__(self) -> str:
        return f"Web3Contract(name={self.name!r}, address={self.address!r})"

    async def call(self, method: str, *args: Any) -> Any:
        """
        Call a view method and return its decoded output.

        Raises:
            ContractCallError: Unknown method, transport failure after retries,
                revert, or undecodable output.
        """
        try:
            function = getattr(self._contract.functions, method)
        except AttributeError as e:
            raise ContractCallError(self.name, method, e) from e

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(TRANSIENT_ERRORS),
                stop=stop_after_attempt(self._max_retries),
                wait=self._retry_wait,
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.debug(
                            "Retrying contract call",
                            contract=self.name,
                            method=method,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    return await function(*args).call()
        except Exception as e:
            raise ContractCallError(self.name, method, e) from e

        raise AssertionError("AsyncRetrying should have returned or raised")  # pragma: no cover


def connect(rpc_url: str, timeout: float = 30.0) -> AsyncWeb3:
    """Build an async web3 client for an HTTP JSON-RPC endpoint."""
    provider = AsyncWeb3.AsyncHTTPProvider(
        rpc_url,
        request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)},
    )
    return AsyncWeb3(provider)


def load_abi(path: Path) -> list[dict[str, Any]]:
    """Load an ABI from a JSON file (bare ABI list or artifact with an `abi` key)."""
    with path.open(encoding="utf-8") as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("abi")
    if not isinstance(raw, list):
        raise ValueError(f"ABI file has an unexpected schema: {path}")
    return raw


class ContractManager:
    """
    Registry of contract ABIs and deployed addresses.

    Used at the application edge to build contract handles; aggregation code
    receives handles explicitly and never looks contracts up by name.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        abi_dir: Path,
        addresses: Mapping[str, str] | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self._w3 = w3
        self._abi_dir = Path(abi_dir)
        self._addresses = dict(addresses or {})
        self._max_retries = max_retries
        self._abis: dict[str, list[dict[str, Any]]] = {}

    def abi(self, name: str) -> list[dict[str, Any]]:
        """Return the ABI for a contract name, loading it on first use."""
        if name not in self._abis:
            path = self._abi_dir / f"{name}.json"
            if not path.exists():
                raise ContractNotFoundError(name)
            self._abis[name] = load_abi(path)
        return self._abis[name]

    def at(self, name: str, address: str) -> Web3Contract:
        """Bind the named ABI to an explicit address (e.g. a per-node contract)."""
        contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=self.abi(name),
        )
        return Web3Contract(contract, name, max_retries=self._max_retries)

    def get(self, name: str) -> Web3Contract:
        """Return a handle for a registered singleton contract."""
        address = self._addresses.get(name)
        if address is None:
            raise ContractNotFoundError(name)
        return self.at(name, address)
