"""
Tests for the JSON-RPC status client (respx at the HTTP boundary).
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
import respx
from tenacity import wait_none

from smartnode.exceptions import FieldFetchError, RPCError, RPCUnavailableError
from smartnode.rpc import NodeStatus, RPCClient

RPC_URL = "http://node.test:8545"


def _rpc_handler(results: dict[str, Any]):
    """Answer each JSON-RPC request from a method -> result table."""

    def _handle(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method = payload["method"]
        if method not in results:
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": payload["id"],
                    "error": {"code": -32601, "message": f"method {method} not found"},
                },
            )
        return httpx.Response(
            200, json={"jsonrpc": "2.0", "id": payload["id"], "result": results[method]}
        )

    return _handle


def _client(max_retries: int = 3) -> RPCClient:
    return RPCClient(RPC_URL, timeout=5.0, max_retries=max_retries, retry_wait=wait_none())


class TestRequest:
    @respx.mock
    async def test_returns_result(self) -> None:
        route = respx.post(RPC_URL).mock(side_effect=_rpc_handler({"eth_chainId": "0x1"}))

        async with _client() as client:
            assert await client.request("eth_chainId") == "0x1"

        sent = json.loads(route.calls.last.request.content)
        assert sent["jsonrpc"] == "2.0"
        assert sent["method"] == "eth_chainId"
        assert sent["params"] == []

    @respx.mock
    async def test_request_ids_increment(self) -> None:
        route = respx.post(RPC_URL).mock(side_effect=_rpc_handler({"eth_chainId": "0x1"}))

        async with _client() as client:
            await client.request("eth_chainId")
            await client.request("eth_chainId")

        ids = [json.loads(call.request.content)["id"] for call in route.calls]
        assert ids == [1, 2]

    @respx.mock
    async def test_json_rpc_error_not_retried(self) -> None:
        route = respx.post(RPC_URL).mock(side_effect=_rpc_handler({}))

        async with _client() as client:
            with pytest.raises(RPCError) as exc_info:
                await client.request("eth_bogus")

        assert exc_info.value.code == -32601
        assert route.call_count == 1

    @respx.mock
    async def test_retries_unavailable_node(self) -> None:
        route = respx.post(RPC_URL).mock(
            side_effect=[
                httpx.Response(503, text="starting up"),
                httpx.Response(200, json={"jsonrpc": "2.0", "id": 2, "result": "0x10"}),
            ]
        )

        async with _client() as client:
            assert await client.request("eth_blockNumber") == "0x10"

        assert route.call_count == 2

    @respx.mock
    async def test_gives_up_on_persistent_unavailability(self) -> None:
        route = respx.post(RPC_URL).mock(return_value=httpx.Response(429, text="slow down"))

        async with _client(max_retries=2) as client:
            with pytest.raises(RPCUnavailableError):
                await client.request("eth_blockNumber")

        assert route.call_count == 2

    @respx.mock
    async def test_client_error_status(self) -> None:
        respx.post(RPC_URL).mock(return_value=httpx.Response(401, text="unauthorized"))

        async with _client() as client:
            with pytest.raises(RPCError) as exc_info:
                await client.request("eth_blockNumber")

        assert exc_info.value.code == 401
        assert not isinstance(exc_info.value, RPCUnavailableError)

    @respx.mock
    async def test_network_error_retried(self) -> None:
        route = respx.post(RPC_URL).mock(
            side_effect=[
                httpx.ConnectError("refused"),
                httpx.Response(200, json={"jsonrpc": "2.0", "id": 2, "result": "0x1"}),
            ]
        )

        async with _client() as client:
            assert await client.request("eth_chainId") == "0x1"

        assert route.call_count == 2


class TestStatus:
    @respx.mock
    async def test_synced_node(self) -> None:
        respx.post(RPC_URL).mock(
            side_effect=_rpc_handler(
                {"eth_chainId": "0x5", "eth_blockNumber": "0x1b4", "eth_syncing": False}
            )
        )

        async with _client() as client:
            status = await client.status()

        assert status == NodeStatus(chain_id=5, block_number=436, syncing=False)

    @respx.mock
    async def test_syncing_node(self) -> None:
        respx.post(RPC_URL).mock(
            side_effect=_rpc_handler(
                {
                    "eth_chainId": "0x1",
                    "eth_blockNumber": "0x10",
                    "eth_syncing": {"currentBlock": "0x10", "highestBlock": "0x20"},
                }
            )
        )

        async with _client() as client:
            status = await client.status()

        assert status.syncing is True

    @respx.mock
    async def test_one_failed_field_fails_status(self) -> None:
        respx.post(RPC_URL).mock(
            side_effect=_rpc_handler({"eth_chainId": "0x1", "eth_blockNumber": "0x10"})
        )

        async with _client() as client:
            with pytest.raises(FieldFetchError) as exc_info:
                await client.status()

        assert exc_info.value.field == "syncing"
        assert isinstance(exc_info.value.cause, RPCError)
