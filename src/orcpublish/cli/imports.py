"""
CLI: ``orcpublish import`` — import an orchestrator package.

The package is named either by its blob store locator
(``--resource-id`` + ``--bml-version``) or by a local zip (``--package``),
which is uploaded to the configured blob store first.
"""

from __future__ import annotations

from pathlib import Path

import typer

from orcpublish.cli.utils import console, err_console, load_settings, make_context, output_result
from orcpublish.core.workspace import Workspace
from orcpublish.ops.imports import import_orchestrator
from orcpublish.publish.requests import ImportRequest


def import_command(
    user: str = typer.Option(..., "--user", "-u", help="Importing user"),
    project: str = typer.Option(..., "--project", "-p", help="Target project name"),
    project_id: int | None = typer.Option(None, "--project-id", help="Target project id"),
    workspace: str = typer.Option("default", "--workspace", "-w", help="Workspace name"),
    workspace_id: int | None = typer.Option(None, "--workspace-id", help="Workspace id"),
    resource_id: str | None = typer.Option(None, "--resource-id", "-r", help="Package resource id"),
    bml_version: str | None = typer.Option(None, "--bml-version", "-v", help="Package resource version"),
    package: Path | None = typer.Option(
        None, "--package", exists=True, dir_okay=False, help="Local package zip to upload and import"
    ),
    label: list[str] = typer.Option([], "--label", "-l", help="Environment label (repeatable)"),
    copy_project_id: int | None = typer.Option(None, "--copy-project-id", help="Fork target project id"),
    copy_project_name: str | None = typer.Option(None, "--copy-project-name", help="Fork target project name"),
    database: str | None = typer.Option(None, "--database", "-d", help="Catalog URL"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate without importing"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Import an orchestrator package into a project."""
    if package is None and not (resource_id and bml_version):
        err_console.print("[bold red]Error[/bold red]: give --package or both --resource-id and --bml-version")
        raise typer.Exit(code=2)

    ctx = make_context(load_settings(database), dry_run=dry_run)

    if package is not None and not dry_run:
        with package.open("rb") as stream:
            locator = ctx.coordinator.blob_store.upload(user, stream, package.name, project)
        resource_id, bml_version = locator.resource_id, locator.version
        console.print(f"[dim]Uploaded {package.name} as {resource_id}/{bml_version}[/dim]")

    request = ImportRequest(
        user_name=user,
        project_name=project,
        project_id=project_id,
        resource_id=resource_id or package.name,
        bml_version=bml_version or "local",
        workspace=Workspace(id=workspace_id, name=workspace),
        labels=tuple(label),
        copy_project_id=copy_project_id,
        copy_project_name=copy_project_name,
    )
    result = import_orchestrator(ctx, request)
    output_result(result, as_json=json_out, title="Orchestrator Import")
