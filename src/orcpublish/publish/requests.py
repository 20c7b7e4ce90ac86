"""
Typed request and result objects of the import pipeline.

Requests carry only validated, transport-agnostic data — no raw HTTP
bodies, no CLI params.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from orcpublish.core.workspace import Workspace


@dataclass(frozen=True, slots=True)
class ImportRequest:
    """One import of a package into a project.

    Attributes:
        user_name: User performing the import.
        project_name: Name of the target project.
        project_id: Id of the target project.
        resource_id: Blob store resource id of the package.
        bml_version: Blob store version of the package.
        workspace: Workspace the project belongs to.
        labels: Environment labels (``"dev"``, ``"prod"``, ``"env=dev"``).
        copy_project_id: Fork target project id.
        copy_project_name: Fork target project name; blank means no fork.
    """

    user_name: str
    project_name: str
    project_id: int | None
    resource_id: str
    bml_version: str
    workspace: Workspace
    labels: tuple[str, ...] = ()
    copy_project_id: int | None = None
    copy_project_name: str | None = None

    @property
    def is_fork(self) -> bool:
        return self.copy_project_id is not None and bool((self.copy_project_name or "").strip())

    @property
    def target_project_id(self) -> int | None:
        return self.copy_project_id if self.is_fork else self.project_id

    @property
    def target_project_name(self) -> str:
        return (self.copy_project_name or "").strip() if self.is_fork else self.project_name


@dataclass
class ImportResult:
    """What one successful import produced."""

    orchestrator_id: int
    uuid: str
    name: str
    created: bool
    version_id: int
    version: str
    valid_flag: bool
    context_id: str
    app_id: int
    stages: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
