"""Node state commands - balances and deposit reservation."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from smartnode.cli.utils import (
    console,
    exit_with_error,
    format_amount,
    print_json,
    run_async,
)
from smartnode.config import is_address
from smartnode.exceptions import SmartnodeError

app = typer.Typer(help="Node contract state.")

AddressArg = Annotated[str, typer.Argument(help="Node contract address (0x...).")]
JsonOpt = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def _require_address(address: str) -> str:
    if not is_address(address):
        exit_with_error(f"Invalid node contract address '{address}'.")
    return address


@app.command("balances")
def node_balances(address: AddressArg, output_json: JsonOpt = False) -> None:
    """Show the node contract's ETH and RPL balances."""
    from smartnode.cli.client_factory import node_info
    from smartnode.node import BalanceRecord  # noqa: TC001

    node_address = _require_address(address)

    async def _fetch() -> BalanceRecord:
        try:
            async with node_info(node_address) as info:
                return await info.balances()
        except (SmartnodeError, OSError, ValueError) as e:
            exit_with_error(e)

    balances = run_async(_fetch())

    if output_json:
        print_json(balances.model_dump())
        return

    table = Table(title="Node Balances")
    table.add_column("Asset", style="cyan")
    table.add_column("Balance", style="green", justify="right")
    table.add_row("ETH", format_amount(balances.ether_balance))
    table.add_row("RPL", format_amount(balances.rpl_balance))
    console.print(table)


@app.command("reservation")
def node_reservation(address: AddressArg, output_json: JsonOpt = False) -> None:
    """Show the node's deposit reservation, if any."""
    from smartnode.cli.client_factory import node_info
    from smartnode.node import ReservationRecord  # noqa: TC001

    node_address = _require_address(address)

    async def _fetch() -> ReservationRecord:
        try:
            async with node_info(node_address) as info:
                return await info.reservation()
        except (SmartnodeError, OSError, ValueError) as e:
            exit_with_error(e)

    reservation = run_async(_fetch())

    if not reservation.exists:
        if output_json:
            print_json({"exists": False})
        else:
            console.print("[yellow]Node has no current deposit reservation.[/yellow]")
        return

    if output_json:
        print_json(reservation.model_dump())
        return

    table = Table(title="Deposit Reservation")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Staking duration", reservation.staking_duration_id)
    table.add_row("ETH required", format_amount(reservation.ether_required))
    table.add_row("RPL required", format_amount(reservation.rpl_required))
    table.add_row("Expires", reservation.expires_at or "")
    console.print(table)
