"""
CLI application for smart node state queries.
"""

from __future__ import annotations

from typing import Annotated

import typer
from dotenv import find_dotenv, load_dotenv

from smartnode.cli.node import app as node_app
from smartnode.cli.utils import console, exit_with_error, print_json, run_async

app = typer.Typer(
    name="smartnode",
    help="Rocket Pool smart node CLI - query node contract state.",
    add_completion=False,
)

app.add_typer(node_app, name="node")


@app.callback()
def main(
    rpc_url: Annotated[
        str | None,
        typer.Option(
            "--rpc-url",
            "-r",
            help="Execution client JSON-RPC URL. Defaults to SMARTNODE_RPC_URL or localhost.",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Rocket Pool smart node CLI."""
    from smartnode.config import NodeConfig, set_config
    from smartnode.exceptions import ConfigError

    load_dotenv(find_dotenv(usecwd=True))

    # Priority: CLI flag > SMARTNODE_* env vars > defaults
    try:
        config = NodeConfig.from_env()
    except ConfigError as e:
        exit_with_error(e)
    if rpc_url:
        config = config.model_copy(update={"rpc_url": rpc_url})
    set_config(config)


@app.command()
def version() -> None:
    """Show version information."""
    from smartnode import __version__

    console.print(f"smartnode-info v{__version__}")


@app.command()
def status(
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show execution client chain ID, head block and sync state."""
    import httpx
    from rich.table import Table

    from smartnode.cli.client_factory import rpc_client
    from smartnode.exceptions import SmartnodeError
    from smartnode.rpc import NodeStatus  # noqa: TC001

    async def _fetch() -> NodeStatus:
        try:
            async with rpc_client() as client:
                return await client.status()
        except (SmartnodeError, httpx.HTTPError) as e:
            exit_with_error(e)

    node_status = run_async(_fetch())

    if output_json:
        print_json(node_status.model_dump())
        return

    table = Table(title="Node Status")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("chain_id", str(node_status.chain_id))
    table.add_row("block_number", str(node_status.block_number))
    table.add_row("syncing", str(node_status.syncing))
    console.print(table)
