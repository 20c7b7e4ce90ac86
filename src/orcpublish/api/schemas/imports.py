"""Import request and response schemas (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from orcpublish.core.workspace import Workspace
from orcpublish.publish.requests import ImportRequest


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkspaceSchema(_CamelModel):
    id: int | None = None
    name: str


class ImportRequestSchema(_CamelModel):
    """Body of ``POST /orchestrators/import``."""

    user_name: str
    project_name: str
    project_id: int | None = None
    resource_id: str
    bml_version: str
    labels: list[str] = Field(default_factory=list)
    workspace: WorkspaceSchema
    copy_project_id: int | None = None
    copy_project_name: str | None = None

    def to_request(self) -> ImportRequest:
        return ImportRequest(
            user_name=self.user_name,
            project_name=self.project_name,
            project_id=self.project_id,
            resource_id=self.resource_id,
            bml_version=self.bml_version,
            workspace=Workspace(id=self.workspace.id, name=self.workspace.name),
            labels=tuple(self.labels),
            copy_project_id=self.copy_project_id,
            copy_project_name=self.copy_project_name,
        )


class ImportAcceptedSchema(_CamelModel):
    orchestrator_id: int | None
    uuid: str | None = None
    name: str | None = None
    created: bool = False
    version: str | None = None
    version_id: int | None = None
    valid_flag: bool = False
    context_id: str | None = None
    app_id: int | None = None
    dry_run: bool = False
