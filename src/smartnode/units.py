"""Conversions between raw on-chain integers and display units."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal, localcontext

from smartnode.constants import TOKEN_DECIMALS


def wei_to_eth(wei: int) -> Decimal:
    """
    Convert a wei amount to ETH (or any 18-decimal token).

    Exact for any magnitude: the decimal context is widened to the number of
    digits in the input, so no rounding happens on large uint256 values.
    """
    if isinstance(wei, bool) or not isinstance(wei, int):
        raise TypeError(f"wei amount must be an int, got {type(wei).__name__}")
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(str(abs(wei))) + 1)
        return Decimal(wei).scaleb(-TOKEN_DECIMALS)


def eth_to_wei(eth: Decimal | int | str) -> int:
    """Convert an ETH amount to wei. Raises ValueError on sub-wei precision."""
    value = Decimal(eth) if not isinstance(eth, Decimal) else eth
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + TOKEN_DECIMALS + 1)
        scaled = value.scaleb(TOKEN_DECIMALS)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{eth} ETH is not a whole number of wei")
    return int(scaled)


def unix_to_datetime(seconds: int) -> datetime:
    """Convert seconds since the Unix epoch to a UTC-aware datetime."""
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"Timestamp out of range: {seconds}") from e
