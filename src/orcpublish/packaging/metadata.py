"""
Metadata importer — parse an unpacked package into orchestrator descriptors.

Package layout::

    <package>/
        orc_meta/orchestrator_info.json   # JSON list of descriptors (or one object)
        orc_flow.zip                      # flow definition, re-stored separately

Descriptor keys are accepted in both the current snake_case form and the
camelCase form written by older exporters (``UUID``, ``orchestratorMode``,
``orchestratorWay``, ``desc``, ``secondaryType``, ``appConnName``).

Tags:
    orcpublish, packaging, metadata, pydantic, parsing

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from orcpublish.catalog.models import OrchestratorInfo
from orcpublish.core.errors import MalformedPackageError

META_DIR = "orc_meta"
META_FILE = "orchestrator_info.json"
FLOW_ZIP = "orc_flow.zip"


class OrchestratorDescriptor(BaseModel):
    """Orchestrator metadata as shipped inside a package."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uuid: str = Field(validation_alias=AliasChoices("uuid", "UUID"))
    name: str
    project_id: int | None = Field(default=None, validation_alias=AliasChoices("project_id", "projectId"))
    workspace_id: int | None = Field(
        default=None, validation_alias=AliasChoices("workspace_id", "workspaceId")
    )
    type: str | None = None
    second_type: str | None = Field(
        default=None, validation_alias=AliasChoices("second_type", "secondaryType")
    )
    app_conn_name: str | None = Field(
        default=None, validation_alias=AliasChoices("app_conn_name", "appConnName")
    )
    mode: str | None = Field(default=None, validation_alias=AliasChoices("mode", "orchestratorMode"))
    way: str | None = Field(default=None, validation_alias=AliasChoices("way", "orchestratorWay"))
    description: str | None = Field(default=None, validation_alias=AliasChoices("description", "desc"))
    uses: str | None = None

    @field_validator("uuid", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    def to_info(self) -> OrchestratorInfo:
        return OrchestratorInfo(**self.model_dump())


class MetadataImporter:
    """Read descriptors from an unpacked package directory."""

    def import_orchestrators(self, package_dir: str | Path) -> list[OrchestratorInfo]:
        """Parse every descriptor of the package, in file order.

        Raises:
            MalformedPackageError: Layout or descriptor contents are invalid.
        """
        package_dir = Path(package_dir)
        meta_path = package_dir / META_DIR / META_FILE
        if not meta_path.is_file():
            raise MalformedPackageError(f"Package has no {META_DIR}/{META_FILE}")
        if not (package_dir / FLOW_ZIP).is_file():
            raise MalformedPackageError(f"Package has no {FLOW_ZIP}")

        try:
            raw: Any = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedPackageError(f"Unreadable orchestrator metadata: {exc}", cause=exc) from exc

        entries = raw if isinstance(raw, list) else [raw]
        if not entries:
            raise MalformedPackageError("Package contains no orchestrator descriptors")

        infos = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise MalformedPackageError(f"Descriptor #{index} is not an object")
            try:
                infos.append(OrchestratorDescriptor.model_validate(entry).to_info())
            except ValidationError as exc:
                raise MalformedPackageError(
                    f"Descriptor #{index} is invalid: {exc.errors()[0]['loc']} {exc.errors()[0]['msg']}",
                    cause=exc,
                ) from exc
        return infos

    @staticmethod
    def flow_archive(package_dir: str | Path) -> Path:
        """Path of the nested flow sub-artifact."""
        return Path(package_dir) / FLOW_ZIP
