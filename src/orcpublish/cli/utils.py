"""
CLI utility helpers: settings overrides, context construction, output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console

from orcpublish.bootstrap import build_coordinator
from orcpublish.catalog.session import create_catalog_engine
from orcpublish.core.logging import configure_logging
from orcpublish.core.settings import PublishSettings
from orcpublish.ops.context import OperationContext
from orcpublish.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)


def load_settings(database: str | None = None) -> PublishSettings:
    """Environment settings, with ``--database`` taking precedence."""
    settings = PublishSettings()
    if database:
        settings = settings.model_copy(update={"database_url": database})
    configure_logging(level=settings.log_level, json_format=settings.json_logs, service="orcpublish")
    return settings


def make_context(
    settings: PublishSettings,
    *,
    dry_run: bool = False,
    with_coordinator: bool = True,
) -> OperationContext:
    """Create an ``OperationContext`` for CLI commands."""
    if with_coordinator:
        return OperationContext(coordinator=build_coordinator(settings), caller="cli", dry_run=dry_run)
    return OperationContext(engine=create_catalog_engine(settings.database_url), caller="cli", dry_run=dry_run)


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal; exit 1 on failure.

    Pipeline failures show their numeric code (``Error (61002): …``).
    """
    if not result.success:
        err = result.error
        msg = err.message if err else "Unknown error"
        code = err.details.get("errorCode", err.code) if err else "ERROR"
        err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
        raise typer.Exit(code=1)

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning[/yellow]: {warning}")

    if as_json:
        console.print_json(json.dumps(_to_dict(result.data), default=str))
        return
    _print_dict(_to_dict(result.data), title=title)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
