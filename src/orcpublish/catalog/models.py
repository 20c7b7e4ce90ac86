"""Catalog domain objects.

Plain dataclasses that cross layer boundaries; the SQLAlchemy rows in
:mod:`orcpublish.catalog.tables` never leave :mod:`orcpublish.catalog.store`.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass

# Fields an update may change; identity, placement and authorship fields stay as stored.
MUTABLE_INFO_FIELDS = (
    "type",
    "second_type",
    "app_conn_name",
    "mode",
    "way",
    "description",
    "uses",
)


@dataclass
class OrchestratorInfo:
    """Identity/catalog row of an orchestrator."""

    uuid: str
    name: str
    id: int | None = None
    project_id: int | None = None
    workspace_id: int | None = None
    type: str | None = None
    second_type: str | None = None
    app_conn_name: str | None = None
    mode: str | None = None
    way: str | None = None
    description: str | None = None
    uses: str | None = None
    creator: str | None = None
    create_time: datetime.datetime | None = None
    update_user: str | None = None
    update_time: datetime.datetime | None = None


@dataclass
class OrchestratorVersion:
    """One published version of an orchestrator."""

    orchestrator_id: int
    version: str
    id: int | None = None
    app_id: int | None = None
    content: str = ""
    context_id: str | None = None
    valid_flag: bool = False
    project_id: int | None = None
    updater: str | None = None
    update_time: datetime.datetime | None = None
    comment: str | None = None
    source: str | None = None
