"""CLI command: netpolgraph server — start the HTTP API."""

from __future__ import annotations

import click
from rich.console import Console

from netpolgraph.config import NetpolGraphConfig

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8480).",
)
@click.pass_context
def server(ctx: click.Context, port: int | None) -> None:
    """Start the netpolgraph HTTP API."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install netpolgraph[web]"
        )
        raise SystemExit(1)

    config = NetpolGraphConfig.load()
    if port is not None:
        config.web_port = port

    console.print(
        f"[bold]netpolgraph[/bold] API starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}[/cyan]"
    )
    console.print("  [dim]Bound to 127.0.0.1 only[/dim]\n")

    from netpolgraph.web.app import create_app

    uvicorn.run(
        create_app(config),
        host=config.web_host,
        port=config.web_port,
        log_level="info",
    )
