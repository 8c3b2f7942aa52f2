"""
Configuration for node queries (RPC endpoint, ABIs, contract addresses).
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from smartnode.constants import (
    DEFAULT_AGGREGATION_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RPC_URL,
    ROCKET_NODE_SETTINGS,
)
from smartnode.exceptions import ConfigError

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: str) -> bool:
    """Return True for a 0x-prefixed, 20-byte hex address (checksum not enforced)."""
    return bool(_ADDRESS_RE.match(value))


class NodeConfig(BaseModel):
    """Connection and contract settings."""

    model_config = ConfigDict(frozen=True)

    rpc_url: str = DEFAULT_RPC_URL
    abi_dir: Path = Path("contracts")
    node_settings_address: str | None = None
    timeout: float = Field(default=DEFAULT_AGGREGATION_TIMEOUT, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1)

    @field_validator("node_settings_address")
    @classmethod
    def _check_address(cls, value: str | None) -> str | None:
        if value is not None and not is_address(value):
            raise ValueError(f"not a valid address: {value!r}")
        return value

    @classmethod
    def from_env(cls) -> NodeConfig:
        """
        Build config from `SMARTNODE_*` environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigError: A variable is present but invalid.
        """
        env = {
            "rpc_url": os.getenv("SMARTNODE_RPC_URL"),
            "abi_dir": os.getenv("SMARTNODE_ABI_DIR"),
            "node_settings_address": os.getenv("SMARTNODE_NODE_SETTINGS_ADDRESS"),
            "timeout": os.getenv("SMARTNODE_TIMEOUT"),
            "max_retries": os.getenv("SMARTNODE_MAX_RETRIES"),
        }
        values = {k: v.strip() for k, v in env.items() if v is not None and v.strip()}
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigError(f"Invalid configuration: {details}") from e

    def contract_addresses(self) -> dict[str, str]:
        """Registry addresses for singleton contracts that are configured."""
        addresses: dict[str, str] = {}
        if self.node_settings_address:
            addresses[ROCKET_NODE_SETTINGS] = self.node_settings_address
        return addresses


# Singleton for global access
_config = NodeConfig()


def get_config() -> NodeConfig:
    """Get the current global configuration."""
    return _config


def set_config(config: NodeConfig) -> None:
    """Replace the global configuration."""
    global _config  # noqa: PLW0603 - intentional singleton for CLI state
    _config = config
