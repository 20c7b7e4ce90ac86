"""
Identity resolver — decide whether an incoming orchestrator is new, known, or a clash.

Decision table (after an optional fork rebinding):

======================  ======================  ==========================
name-collision uuid     identity-match row      outcome
======================  ======================  ==========================
none                    none                    CREATE
none                    present                 UPDATE
same as descriptor      present                 UPDATE (self-collision)
different uuid          any                     DuplicateNameError (61002)
======================  ======================  ==========================

A fork (``copy_project_id`` + non-blank ``copy_project_name``) moves the
descriptor to the target project and gives it a fresh uuid, so it can only
ever be created, never matched.

An update never relocates the catalog row: a known uuid imported into
another project keeps its stored project and workspace, and only the new
version row records the importing project.

The decision is a pre-check. The catalog's partial unique index still
decides races at flush/commit time.

Tags:
    orcpublish, publish, identity, conflict-resolution
"""

from __future__ import annotations

import uuid as uuid_mod
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum

from orcpublish.catalog.models import MUTABLE_INFO_FIELDS, OrchestratorInfo
from orcpublish.catalog.store import CatalogTransaction
from orcpublish.core.errors import DuplicateNameError
from orcpublish.core.logging import get_logger
from orcpublish.publish.requests import ImportRequest

logger = get_logger(__name__)

DEFAULT_MODE = "pom_work_flow"
DEFAULT_WAY = ",pom_work_flow_DAG,"


class IdentityOutcome(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True, slots=True)
class IdentityDecision:
    outcome: IdentityOutcome
    info: OrchestratorInfo

    @property
    def created(self) -> bool:
        return self.outcome is IdentityOutcome.CREATE


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class IdentityResolver:
    def __init__(
        self,
        *,
        default_mode: str = DEFAULT_MODE,
        default_way: str = DEFAULT_WAY,
        clock: Callable[[], datetime] | None = None,
        uuid_factory: Callable[[], str] | None = None,
    ) -> None:
        self.default_mode = default_mode
        self.default_way = default_way
        self._clock = clock or (lambda: datetime.now(UTC))
        self._uuid_factory = uuid_factory or (lambda: str(uuid_mod.uuid4()))

    def apply_fork(self, info: OrchestratorInfo, request: ImportRequest) -> OrchestratorInfo:
        """Rebind *info* to the fork target with a fresh uuid (no-op without a fork)."""
        if not request.is_fork:
            return info
        forked = replace(info, project_id=request.copy_project_id, uuid=self._uuid_factory())
        logger.info(
            "orchestrator_forked",
            name=info.name,
            source_uuid=info.uuid,
            uuid=forked.uuid,
            project_id=forked.project_id,
        )
        return forked

    def fill_defaults(self, info: OrchestratorInfo, request: ImportRequest) -> OrchestratorInfo:
        """Bind *info* to the target project and backfill fields older packages lack."""
        changes: dict[str, object] = {}
        if info.workspace_id is None:
            changes["workspace_id"] = request.workspace.id
        if _blank(info.mode):
            changes["mode"] = self.default_mode
        if _blank(info.way):
            changes["way"] = self.default_way
        # package project ids come from the exporting environment
        target = request.target_project_id
        if target is not None and info.project_id != target:
            changes["project_id"] = target
        return replace(info, **changes) if changes else info

    def resolve(
        self,
        info: OrchestratorInfo,
        request: ImportRequest,
        txn: CatalogTransaction,
    ) -> IdentityDecision:
        """Classify *info* against the catalog seen through *txn*.

        Raises:
            DuplicateNameError: A different orchestrator owns the name in the project.
        """
        info = self.fill_defaults(self.apply_fork(info, request), request)

        name_uuid = txn.find_uuid_by_project_and_name(info.project_id, info.name)
        existing = txn.get_by_uuid(info.uuid)

        if name_uuid and name_uuid != info.uuid:
            logger.info(
                "orchestrator_name_conflict",
                name=info.name,
                project_id=info.project_id,
                uuid=info.uuid,
                owner_uuid=name_uuid,
            )
            raise DuplicateNameError(info.name, project_id=info.project_id)

        now = self._clock()
        if existing is not None:
            merged = replace(
                existing,
                **{name: getattr(info, name) for name in MUTABLE_INFO_FIELDS},
                update_user=request.user_name,
                update_time=now,
            )
            return IdentityDecision(IdentityOutcome.UPDATE, merged)

        created = replace(
            info,
            id=None,
            creator=request.user_name,
            create_time=now,
            update_user=request.user_name,
            update_time=now,
        )
        return IdentityDecision(IdentityOutcome.CREATE, created)
