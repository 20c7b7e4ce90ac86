"""Project sync — tell the project service about development imports.

The sender is injected into the coordinator; there is no process-wide
sender factory. Notices are only sent for development-labelled imports
and only after the catalog transaction has committed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from orcpublish.catalog.models import OrchestratorInfo


@dataclass(frozen=True, slots=True)
class ProjectImportNotice:
    orchestrator_id: int
    uuid: str
    name: str
    project_id: int | None
    workspace_id: int | None
    type: str | None
    mode: str | None
    way: str | None
    version_id: int

    @classmethod
    def from_info(cls, info: OrchestratorInfo, version_id: int) -> ProjectImportNotice:
        return cls(
            orchestrator_id=info.id,
            uuid=info.uuid,
            name=info.name,
            project_id=info.project_id,
            workspace_id=info.workspace_id,
            type=info.type,
            mode=info.mode,
            way=info.way,
            version_id=version_id,
        )


@runtime_checkable
class ProjectSender(Protocol):
    def ask(self, notice: ProjectImportNotice) -> Any:
        ...


class HttpProjectSender:
    """POST the notice as JSON to ``<base_url>/orchestrators/imported``."""

    def __init__(self, base_url: str, *, timeout: float = 30.0, client: httpx.Client | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def ask(self, notice: ProjectImportNotice) -> Any:
        resp = self._client.post("/orchestrators/imported", json=asdict(notice))
        resp.raise_for_status()
        return resp.json() if resp.content else None

    def close(self) -> None:
        self._client.close()
