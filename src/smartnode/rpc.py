"""Minimal JSON-RPC client for node operational status."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import BaseModel, ConfigDict
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from smartnode.constants import DEFAULT_MAX_RETRIES, DEFAULT_RPC_URL
from smartnode.exceptions import RPCError, RPCUnavailableError
from smartnode.fanin import FieldTask, gather_fields

if TYPE_CHECKING:
    from types import TracebackType

    from tenacity.wait import WaitBaseT


logger = structlog.get_logger()

_RETRY_WAIT = wait_exponential(multiplier=1, min=1, max=30)


def _hex_to_int(value: Any) -> int:
    if not isinstance(value, str):
        raise ValueError(f"Expected hex quantity, got {value!r}")
    return int(value, 16)


def _is_syncing(value: Any) -> bool:
    # eth_syncing returns `false` when synced, otherwise a progress object
    return value is not False


class NodeStatus(BaseModel):
    """Snapshot of the execution client's sync state."""

    model_config = ConfigDict(frozen=True)

    chain_id: int
    block_number: int
    syncing: bool


class RPCClient:
    """
    Async JSON-RPC client over HTTP.

    Network errors and HTTP 429/5xx responses are retried with exponential
    backoff. JSON-RPC error objects are returned to the caller as `RPCError`.
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        timeout: float = 30.0,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_wait: WaitBaseT = _RETRY_WAIT,
    ) -> None:
        self._url = rpc_url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )
        self._max_retries = max(1, max_retries)
        self._retry_wait = retry_wait
        self._ids = itertools.count(1)

    async def __aenter__(self) -> RPCClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Send one JSON-RPC request and return its `result`.

        Raises:
            RPCUnavailableError: Node kept answering 429/5xx after all retries.
            RPCError: The node returned a JSON-RPC error object or HTTP 4xx.
            httpx.HTTPError: Network failure after all retries.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(
                (
                    RPCUnavailableError,
                    httpx.NetworkError,
                    httpx.TimeoutException,
                )
            ),
            stop=stop_after_attempt(self._max_retries),
            wait=self._retry_wait,
            reraise=True,
        ):
            with attempt:
                response = await self._client.post(self._url, json=payload)

                if response.status_code == 429 or response.status_code >= 500:
                    raise RPCUnavailableError(
                        response.status_code, response.text or "Node unavailable"
                    )
                if response.status_code >= 400:
                    raise RPCError(response.status_code, response.text)

                body: dict[str, Any] = response.json()
                error = body.get("error")
                if error:
                    raise RPCError(int(error.get("code", -1)), str(error.get("message", "")))
                return body.get("result")

        raise AssertionError("AsyncRetrying should have returned or raised")  # pragma: no cover

    async def chain_id(self) -> int:
        return _hex_to_int(await self.request("eth_chainId"))

    async def block_number(self) -> int:
        return _hex_to_int(await self.request("eth_blockNumber"))

    async def syncing(self) -> bool:
        return _is_syncing(await self.request("eth_syncing"))

    async def status(self, timeout: float | None = None) -> NodeStatus:
        """Fetch chain ID, head block and sync state concurrently."""
        fields = await gather_fields(
            [
                FieldTask("chain_id", self.chain_id, "chain ID"),
                FieldTask("block_number", self.block_number, "latest block number"),
                FieldTask("syncing", self.syncing, "sync status"),
            ],
            timeout=timeout,
        )
        logger.debug("Fetched node status", **fields)
        return NodeStatus(**fields)
