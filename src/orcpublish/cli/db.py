"""
CLI: ``orcpublish db`` — catalog database commands.
"""

from __future__ import annotations

import typer

from orcpublish.cli.utils import load_settings, make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="Catalog URL"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changes"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Create the catalog tables."""
    from orcpublish.ops.database import initialize_catalog

    ctx = make_context(load_settings(database), dry_run=dry_run, with_coordinator=False)
    result = initialize_catalog(ctx)
    output_result(result, as_json=json_out, title="Catalog Init")
