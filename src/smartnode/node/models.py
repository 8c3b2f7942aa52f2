"""Pydantic models for aggregated node state."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

from smartnode.units import unix_to_datetime


class BalanceRecord(BaseModel):
    """Node contract balances, converted from wei."""

    model_config = ConfigDict(frozen=True)

    ether_balance: Decimal
    """ETH held by the node contract."""

    rpl_balance: Decimal
    """RPL held by the node contract."""


class ReservationRecord(BaseModel):
    """
    Deposit reservation details for a node.

    When `exists` is False every other field keeps its zero value and carries
    no meaning.
    """

    model_config = ConfigDict(frozen=True)

    exists: bool
    """Whether the node currently holds a deposit reservation."""

    staking_duration_id: str = ""
    """Staking duration tier, as named by the node settings contract."""

    ether_required: Decimal = Decimal(0)
    """ETH required to complete the deposit."""

    rpl_required: Decimal = Decimal(0)
    """RPL required to complete the deposit."""

    expiry_timestamp: int | None = None
    """Unix seconds at which the reservation lapses (reserved time + reservation duration)."""

    @model_validator(mode="after")
    def _expiry_required_when_reserved(self) -> ReservationRecord:
        if self.exists and self.expiry_timestamp is None:
            raise ValueError("expiry_timestamp is required when a reservation exists")
        return self

    @property
    def expiry_time(self) -> datetime | None:
        """Expiry as a UTC datetime (None when there is no reservation)."""
        if not self.exists or self.expiry_timestamp is None:
            return None
        return unix_to_datetime(self.expiry_timestamp)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def expires_at(self) -> str | None:
        """Expiry as ISO 8601 UTC, or raw Unix seconds when beyond datetime's range."""
        if not self.exists or self.expiry_timestamp is None:
            return None
        try:
            return unix_to_datetime(self.expiry_timestamp).isoformat()
        except ValueError:
            return str(self.expiry_timestamp)

    def time_remaining(self, now: datetime | None = None) -> timedelta | None:
        """Time left before expiry, clamped at zero. None when there is no reservation."""
        expiry = self.expiry_time
        if expiry is None:
            return None
        remaining = expiry - (now or datetime.now(UTC))
        return max(remaining, timedelta(0))

    def is_expired(self, now: datetime | None = None) -> bool:
        remaining = self.time_remaining(now)
        return remaining is not None and remaining == timedelta(0)
