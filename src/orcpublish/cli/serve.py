"""
CLI: ``orcpublish serve`` — start the API server.
"""

from __future__ import annotations

import typer
import uvicorn

from orcpublish.cli.utils import console

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Bind address"),
    port: int = typer.Option(12000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Start the orcpublish REST API server."""
    console.print(f"[bold green]Starting orcpublish API[/bold green] on {host}:{port}")
    uvicorn.run(
        "orcpublish.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
