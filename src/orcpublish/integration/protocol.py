"""
Development-operation contract between the pipeline and downstream systems.

A downstream system (workflow engine, visualization engine, data-quality
engine, …) is reached through a :class:`DevelopmentOperationProvider` with a
single capability, ``import_ref``. The pipeline fills an
:class:`ImportRequestRef` and expects a :class:`RefJobContentResponse`
holding the downstream application id and the serialized job content.

Architecture:
    ::

        ImportRequestRef ──► provider.import_ref() ──► RefJobContentResponse
          user_name, workspace, labels                  app_id: int
          orchestrator (OrchestratorInfo)               content: str
          handle (OrchestratorHandle)
          context_id            ← context setter
          ref_project_id        ← project setter
          project_name          ← project setter
          resource_map          ← resource setter
          new_version           ← resource setter

Tags:
    orcpublish, integration, protocol, development-operation

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

from orcpublish.catalog.models import OrchestratorInfo
from orcpublish.core.errors import IntegrationDispatchError
from orcpublish.core.labels import normalize_labels
from orcpublish.core.workspace import Workspace

IMPORT_STANDARD = "import"

RESOURCE_ID_KEY = "resourceId"
RESOURCE_VERSION_KEY = "version"

ORCHESTRATION_ID_KEY = "orchestrationId"
ORCHESTRATION_CONTENT_KEY = "orchestrationContent"


@dataclass(frozen=True, slots=True)
class OrchestratorHandle:
    """Per-(workspace, type, labels) orchestrator instance used for dispatch."""

    orchestrator_type: str | None
    workspace_name: str
    labels: frozenset[str]
    created_by: str
    created_at: datetime


class OrchestratorManager:
    """Caches :class:`OrchestratorHandle` instances."""

    def __init__(self) -> None:
        self._handles: dict[tuple[str, str | None, frozenset[str]], OrchestratorHandle] = {}
        self._lock = threading.Lock()

    def get_or_create(
        self,
        user_name: str,
        workspace_name: str,
        orchestrator_type: str | None,
        labels: list[str] | frozenset[str],
    ) -> OrchestratorHandle:
        key = (workspace_name, orchestrator_type, normalize_labels(labels))
        with self._lock:
            handle = self._handles.get(key)
            if handle is None:
                handle = OrchestratorHandle(
                    orchestrator_type=orchestrator_type,
                    workspace_name=workspace_name,
                    labels=key[2],
                    created_by=user_name,
                    created_at=datetime.now(UTC),
                )
                self._handles[key] = handle
            return handle


@dataclass
class ImportRequestRef:
    """Mutable request handed to ``import_ref``; shaped by the coordinator's setters."""

    user_name: str
    workspace: Workspace
    labels: frozenset[str]
    orchestrator: OrchestratorInfo
    handle: OrchestratorHandle
    context_id: str | None = None
    ref_project_id: int | None = None
    project_name: str | None = None
    resource_map: dict[str, str] = field(default_factory=dict)
    new_version: str | None = None

    @property
    def resource_id(self) -> str | None:
        return self.resource_map.get(RESOURCE_ID_KEY)

    @property
    def resource_version(self) -> str | None:
        return self.resource_map.get(RESOURCE_VERSION_KEY)

    def to_payload(self) -> dict[str, Any]:
        """JSON body for HTTP providers."""
        return {
            "userName": self.user_name,
            "workspace": {"id": self.workspace.id, "name": self.workspace.name},
            "labels": sorted(self.labels),
            "orchestrator": {
                "uuid": self.orchestrator.uuid,
                "name": self.orchestrator.name,
                "type": self.orchestrator.type,
                "id": self.orchestrator.id,
            },
            "contextId": self.context_id,
            "refProjectId": self.ref_project_id,
            "projectName": self.project_name,
            "resourceMap": dict(self.resource_map),
            "newVersion": self.new_version,
        }


@dataclass(frozen=True, slots=True)
class RefJobContentResponse:
    """Downstream result of an import: application id + serialized content."""

    app_id: int
    content: str

    @classmethod
    def from_job_content(cls, job_content: dict[str, Any]) -> RefJobContentResponse:
        """Validate a ``{orchestrationId, orchestrationContent}`` mapping."""
        app_id = job_content.get(ORCHESTRATION_ID_KEY)
        content = job_content.get(ORCHESTRATION_CONTENT_KEY)
        if isinstance(app_id, bool) or not isinstance(app_id, int):
            try:
                app_id = int(str(app_id))
            except ValueError as exc:
                raise IntegrationDispatchError(
                    f"Downstream response has no usable {ORCHESTRATION_ID_KEY}: {app_id!r}", cause=exc
                ) from exc
        if not isinstance(content, str):
            raise IntegrationDispatchError(f"Downstream response has no {ORCHESTRATION_CONTENT_KEY}")
        return cls(app_id=app_id, content=content)


@runtime_checkable
class DevelopmentOperationProvider(Protocol):
    """A downstream system able to import a flow sub-artifact."""

    def import_ref(self, request: ImportRequestRef) -> RefJobContentResponse:
        ...
