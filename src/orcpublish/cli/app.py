"""
Root Typer application for the orcpublish CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from orcpublish import __version__

app = Typer(
    name="orcpublish",
    help="orcpublish — import and publish workflow orchestrators.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"orcpublish {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """orcpublish CLI — catalog, packages and imports."""


from orcpublish.cli.db import app as db_app  # noqa: E402
from orcpublish.cli.imports import import_command  # noqa: E402
from orcpublish.cli.pack import pack_command  # noqa: E402
from orcpublish.cli.serve import app as serve_app  # noqa: E402

app.add_typer(db_app, name="db", help="Catalog database operations.")
app.add_typer(serve_app, name="serve", help="Start the API server.")
app.command("import")(import_command)
app.command("pack")(pack_command)
