"""Custom exceptions for node state queries."""

from __future__ import annotations

from collections.abc import Sequence


class SmartnodeError(Exception):
    """Base exception for smartnode errors."""


class ConfigError(SmartnodeError):
    """Invalid configuration value."""


class ContractNotFoundError(SmartnodeError):
    """Contract name is not known to the contract registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Contract not found: {name}")


class ContractCallError(SmartnodeError):
    """A single contract method call failed (transport or decoding)."""

    def __init__(self, contract: str, method: str, cause: BaseException) -> None:
        self.contract = contract
        self.method = method
        self.cause = cause
        super().__init__(f"{contract}.{method}() failed: {cause}")


class GatingCallError(SmartnodeError):
    """The existence check that gates an aggregation failed."""

    def __init__(self, description: str, cause: BaseException) -> None:
        self.description = description
        self.cause = cause
        super().__init__(f"Error retrieving {description}: {cause}")


class FieldFetchError(SmartnodeError):
    """One field of a multi-field aggregation failed; the whole record is discarded."""

    def __init__(self, field: str, description: str, cause: BaseException | None) -> None:
        self.field = field
        self.description = description
        self.cause = cause
        super().__init__(f"Error retrieving {description}: {cause}")


class AggregationTimeoutError(FieldFetchError):
    """The aggregation deadline passed before every field arrived."""

    def __init__(
        self,
        pending: Sequence[str],
        timeout: float | None,
        descriptions: Sequence[str] | None = None,
    ) -> None:
        self.pending = tuple(pending)
        self.timeout = timeout
        super().__init__(
            self.pending[0] if self.pending else "",
            ", ".join(descriptions if descriptions is not None else self.pending),
            TimeoutError(f"timed out after {timeout}s"),
        )


class RPCError(SmartnodeError):
    """JSON-RPC or HTTP error returned by the node."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"RPC Error {code}: {message}")


class RPCUnavailableError(RPCError):
    """Node temporarily unavailable (HTTP 429 or 5xx)."""
