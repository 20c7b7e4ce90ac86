"""
CLI: ``orcpublish pack`` — build a package zip from descriptors and a flow.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from orcpublish.cli.utils import console, err_console
from orcpublish.packaging.writer import PackageWriter


def pack_command(
    meta: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with one or more descriptors"),
    flow: Path = typer.Argument(..., exists=True, help="Flow directory or flow zip"),
    output: Path = typer.Argument(..., help="Package zip to write"),
) -> None:
    """Bundle orchestrator descriptors and a flow into an importable package."""
    try:
        raw = json.loads(meta.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        err_console.print(f"[bold red]Error[/bold red]: {meta} is not valid JSON: {exc}")
        raise typer.Exit(code=1) from exc

    descriptors = raw if isinstance(raw, list) else [raw]
    try:
        path = PackageWriter().build(descriptors, flow, output)
    except ValueError as exc:
        err_console.print(f"[bold red]Error[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"[bold green]Package written[/bold green]: {path}")
