"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible. Only fake at system boundaries.
- Real Pydantic records and the real fan-in protocol
- `FakeContract` stands in for the contract transport (the network boundary)
- respx ONLY for HTTP boundary
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from smartnode.config import NodeConfig, set_config

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Mapping


# ============================================================================
# Contract transport fake
# ============================================================================
class FakeContract:
    """
    In-memory `ContractCaller`.

    Per-method behaviour:
    - `values`: decoded return value
    - `errors`: exception raised after the (optional) gate opens
    - `gates`: `asyncio.Event` the call waits on before completing, which lets a
      test choose the exact completion order across concurrent calls
    """

    def __init__(
        self,
        name: str,
        values: Mapping[str, Any] | None = None,
        *,
        errors: Mapping[str, BaseException] | None = None,
        gates: Mapping[str, asyncio.Event] | None = None,
        completion_log: list[str] | None = None,
    ) -> None:
        self.name = name
        self._values = dict(values or {})
        self._errors = dict(errors or {})
        self._gates = dict(gates or {})
        self.calls: list[str] = []
        self.cancelled: list[str] = []
        self.completion_log = completion_log if completion_log is not None else []

    async def call(self, method: str, *args: Any) -> Any:
        self.calls.append(method)
        try:
            gate = self._gates.get(method)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            self.cancelled.append(method)
            raise

        if method in self._errors:
            raise self._errors[method]
        if method not in self._values:
            raise LookupError(f"{self.name} has no value for {method}")
        self.completion_log.append(method)
        return self._values[method]


@pytest.fixture
def make_contract() -> Callable[..., FakeContract]:
    """Factory for `FakeContract` instances."""

    def _make(
        name: str = "rocketNodeContract", values: Mapping[str, Any] | None = None, **kw: Any
    ) -> FakeContract:
        return FakeContract(name, values, **kw)

    return _make


# ============================================================================
# Canonical contract state
# ============================================================================
WEI = 10**18


@pytest.fixture
def balance_values() -> dict[str, int]:
    return {
        "getBalanceETH": 2_500_000_000_000_000_000,
        "getBalanceRPL": 1_000_000_000_000_000_000,
    }


@pytest.fixture
def reservation_values() -> dict[str, Any]:
    """Node contract values for a node holding a reservation."""
    return {
        "getHasDepositReservation": True,
        "getDepositReserveDurationID": "3m",
        "getDepositReserveEtherRequired": 16 * WEI,
        "getDepositReserveRPLRequired": 3 * WEI // 2,
        "getDepositReservedTime": 1000,
    }


@pytest.fixture
def settings_values() -> dict[str, Any]:
    return {"getDepositReservationTime": 500}


# ============================================================================
# Global config isolation
# ============================================================================
@pytest.fixture(autouse=True)
def _reset_config() -> Generator[None, None, None]:
    set_config(NodeConfig())
    yield
    set_config(NodeConfig())
