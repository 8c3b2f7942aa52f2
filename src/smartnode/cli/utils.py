"""Shared utilities for CLI commands (console output, async helpers)."""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from typing import TYPE_CHECKING, Any, NoReturn, TypeVar

import typer
from rich.console import Console

if TYPE_CHECKING:
    from collections.abc import Coroutine

console = Console()

T = TypeVar("T")


def run_async(coro: Coroutine[object, object, T]) -> T:
    """Run a coroutine from a sync CLI command.

    Raises:
        typer.Exit: With code 130 on KeyboardInterrupt (standard SIGINT exit code).
    """
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise typer.Exit(130) from None


def exit_with_error(error: BaseException | str) -> NoReturn:
    """Print a standardized error line and exit with status 1."""
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def format_amount(value: Decimal) -> str:
    """Plain decimal notation without trailing zeros (exact, no context rounding)."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return format_amount(value)
    return str(value)


def print_json(data: dict[str, Any]) -> None:
    """Print a dict as JSON; decimals are emitted as strings to keep full precision."""
    console.print_json(json.dumps(data, default=_json_default))
