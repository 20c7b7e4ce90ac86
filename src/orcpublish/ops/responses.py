"""
Typed response objects for operations.

Responses carry only domain data: no HTTP status codes, no CLI formatting.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CatalogInitResult:
    """Result payload for :func:`orcpublish.ops.database.initialize_catalog`."""

    tables_created: list[str]
    dry_run: bool = False


@dataclass(slots=True)
class ImportAccepted:
    """Result payload for :func:`orcpublish.ops.imports.import_orchestrator`.

    ``orchestrator_id`` is ``None`` only for dry runs.
    """

    orchestrator_id: int | None
    uuid: str | None = None
    name: str | None = None
    created: bool = False
    version: str | None = None
    version_id: int | None = None
    valid_flag: bool = False
    context_id: str | None = None
    app_id: int | None = None
    stages: list[str] = field(default_factory=list)
    dry_run: bool = False
