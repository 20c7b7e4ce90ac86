"""
Import coordinator — one package in, one committed orchestrator version out.

Manifesto:
    An import touches four external systems (blob store, catalog, context
    service, downstream provider). The coordinator runs them in a fixed
    linear order, keeps every catalog write inside one explicit transaction
    and always cleans its scratch files, so that a failed import leaves no
    catalog trace and a retried import of the same uuid is just an update.

Architecture:
    ::

        fetch ──► parse ──► ┌──────────── CatalogTransaction ────────────┐
                            │ resolve identity                           │
                            │ insert / update info row                   │
                            │ re-upload orc_flow.zip to the blob store   │
                            │ allocate version                           │
                            │ register context id                        │
                            │ insert version row (content="")            │
                            │ dispatch import_ref downstream             │
                            │ update version row (app_id, content)       │
                            └──────────────── commit ────────────────────┘
                                        │
                                        └──► project sync (dev only, optional)

    Stages, in order: FETCHED, PARSED, IDENTITY_RESOLVED, CATALOG_UPSERTED,
    SUB_ARTIFACT_REUPLOADED, VERSION_ALLOCATED, CONTEXT_REGISTERED,
    VERSION_ROW_CREATED, DISPATCHED, VERSION_ROW_FINALIZED.

Guardrails:
    - Any exception, including ``KeyboardInterrupt``, rolls the transaction
      back and removes the scratch directory.
    - The stage reached is attached to the error context of a failure.
    - ``valid_flag`` is decided once, when the version row is created:
      development labels start valid, everything else starts invalid.

Examples:
    >>> coordinator = ImportCoordinator(catalog=..., fetcher=..., ...)
    >>> orchestrator_id = coordinator.import_orchestrator(request)

Tags:
    orcpublish, publish, coordinator, transaction, pipeline

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from orcpublish.catalog.models import OrchestratorInfo, OrchestratorVersion
from orcpublish.catalog.store import Catalog
from orcpublish.context.registrar import ContextRegistrar
from orcpublish.core.errors import PublishError
from orcpublish.core.labels import is_dev_env
from orcpublish.core.logging import LogContext, get_logger
from orcpublish.core.versioning import VersionAllocator
from orcpublish.integration.dispatcher import IntegrationDispatcher
from orcpublish.integration.protocol import (
    RESOURCE_ID_KEY,
    RESOURCE_VERSION_KEY,
    ImportRequestRef,
    OrchestratorManager,
)
from orcpublish.packaging.blobstore import BlobLocator, BlobStore
from orcpublish.packaging.fetcher import PackageFetcher
from orcpublish.packaging.metadata import MetadataImporter
from orcpublish.publish.identity import IdentityResolver
from orcpublish.publish.requests import ImportRequest, ImportResult
from orcpublish.publish.sync import ProjectImportNotice, ProjectSender

logger = get_logger(__name__)

IMPORT_COMMENT = "orchestrator import"
IMPORT_SOURCE = "Orchestrator create"


class ImportStage(str, Enum):
    FETCHED = "FETCHED"
    PARSED = "PARSED"
    IDENTITY_RESOLVED = "IDENTITY_RESOLVED"
    CATALOG_UPSERTED = "CATALOG_UPSERTED"
    SUB_ARTIFACT_REUPLOADED = "SUB_ARTIFACT_REUPLOADED"
    VERSION_ALLOCATED = "VERSION_ALLOCATED"
    CONTEXT_REGISTERED = "CONTEXT_REGISTERED"
    VERSION_ROW_CREATED = "VERSION_ROW_CREATED"
    DISPATCHED = "DISPATCHED"
    VERSION_ROW_FINALIZED = "VERSION_ROW_FINALIZED"


class _Progress:
    """Records the stages one import has passed."""

    def __init__(self) -> None:
        self.stages: list[ImportStage] = []

    def reached(self, stage: ImportStage) -> None:
        self.stages.append(stage)
        logger.debug("import_stage", stage=stage.value)

    @property
    def last(self) -> str | None:
        return self.stages[-1].value if self.stages else None


class ImportCoordinator:
    """Runs the import pipeline for one request at a time per call."""

    def __init__(
        self,
        *,
        catalog: Catalog,
        blob_store: BlobStore,
        fetcher: PackageFetcher,
        importer: MetadataImporter,
        identity: IdentityResolver,
        allocator: VersionAllocator,
        registrar: ContextRegistrar,
        dispatcher: IntegrationDispatcher,
        manager: OrchestratorManager | None = None,
        project_sender: ProjectSender | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.catalog = catalog
        self.blob_store = blob_store
        self.fetcher = fetcher
        self.importer = importer
        self.identity = identity
        self.allocator = allocator
        self.registrar = registrar
        self.dispatcher = dispatcher
        self.manager = manager or OrchestratorManager()
        self.project_sender = project_sender
        self._clock = clock or (lambda: datetime.now(UTC))

    def import_orchestrator(self, request: ImportRequest) -> int:
        """Import the package of *request* and return the orchestrator catalog id."""
        return self.run(request).orchestrator_id

    def run(self, request: ImportRequest) -> ImportResult:
        """Import the package of *request* and describe what was written."""
        progress = _Progress()
        with LogContext(
            user=request.user_name,
            project=request.target_project_name,
            resource_id=request.resource_id,
        ):
            logger.info(
                "import_started",
                bml_version=request.bml_version,
                labels=list(request.labels),
                fork=request.is_fork,
            )
            try:
                result = self._run(request, progress)
            except PublishError as exc:
                exc.with_context(
                    user=request.user_name,
                    project=request.target_project_name,
                    project_id=request.target_project_id,
                    resource_id=request.resource_id,
                    stage=progress.last,
                )
                if exc.code == 61002:
                    logger.info("import_rejected", **exc.to_dict())
                else:
                    logger.error("import_failed", **exc.to_dict())
                raise
            except Exception:
                logger.exception("import_failed", stage=progress.last)
                raise

            self._sync_project(request, result)
            logger.info(
                "import_completed",
                orchestrator_id=result.orchestrator_id,
                version=result.version,
                created=result.created,
            )
            return result

    # ------------------------------------------------------------------ #
    # Pipeline
    # ------------------------------------------------------------------ #

    def _run(self, request: ImportRequest, progress: _Progress) -> ImportResult:
        user = request.user_name
        project_name = request.target_project_name
        project_id = request.target_project_id

        with self.fetcher.fetch(user, request.project_name, request.resource_id, request.bml_version) as package_dir:
            progress.reached(ImportStage.FETCHED)

            descriptors = self.importer.import_orchestrators(package_dir)
            incoming = descriptors[0]
            if len(descriptors) > 1:
                logger.warning("package_has_extra_orchestrators", used=incoming.name, count=len(descriptors))
            progress.reached(ImportStage.PARSED)

            with self.catalog.transaction() as txn:
                decision = self.identity.resolve(incoming, request, txn)
                progress.reached(ImportStage.IDENTITY_RESOLVED)

                if decision.created:
                    info = txn.insert_info(decision.info)
                else:
                    txn.update_info(decision.info)
                    info = decision.info
                progress.reached(ImportStage.CATALOG_UPSERTED)

                locator = self._reupload_flow(user, info, package_dir, project_name)
                progress.reached(ImportStage.SUB_ARTIFACT_REUPLOADED)

                previous = txn.get_latest_version(info.id, only_valid=False)
                new_version = self.allocator.next_version(previous)
                progress.reached(ImportStage.VERSION_ALLOCATED)

                context_id = self.registrar.register(
                    request.workspace.name, project_name, info.name, new_version, user
                )
                progress.reached(ImportStage.CONTEXT_REGISTERED)

                version = txn.insert_version(
                    OrchestratorVersion(
                        orchestrator_id=info.id,
                        version=new_version,
                        app_id=None,
                        content="",
                        context_id=context_id,
                        valid_flag=is_dev_env(request.labels),
                        project_id=project_id,
                        updater=user,
                        update_time=self._clock(),
                        comment=IMPORT_COMMENT,
                        source=IMPORT_SOURCE,
                    )
                )
                progress.reached(ImportStage.VERSION_ROW_CREATED)

                handle = self.manager.get_or_create(user, request.workspace.name, info.type, request.labels)

                def set_context(ref: ImportRequestRef) -> None:
                    ref.context_id = context_id

                def set_project(ref: ImportRequestRef) -> None:
                    ref.ref_project_id = project_id
                    ref.project_name = project_name

                def set_resource(ref: ImportRequestRef) -> None:
                    ref.resource_map = {
                        RESOURCE_ID_KEY: locator.resource_id,
                        RESOURCE_VERSION_KEY: locator.version,
                    }
                    ref.new_version = new_version

                response = self.dispatcher.dispatch(
                    info,
                    handle,
                    user,
                    request.workspace,
                    request.labels,
                    context_setter=set_context,
                    project_setter=set_project,
                    resource_setter=set_resource,
                )
                progress.reached(ImportStage.DISPATCHED)

                version.app_id = response.app_id
                version.content = response.content
                txn.update_version(version)
                progress.reached(ImportStage.VERSION_ROW_FINALIZED)

        return ImportResult(
            orchestrator_id=info.id,
            uuid=info.uuid,
            name=info.name,
            created=decision.created,
            version_id=version.id,
            version=version.version,
            valid_flag=version.valid_flag,
            context_id=context_id,
            app_id=response.app_id,
            stages=[s.value for s in progress.stages],
        )

    def _reupload_flow(self, user: str, info: OrchestratorInfo, package_dir, project_name: str) -> BlobLocator:
        flow_path = self.importer.flow_archive(package_dir)
        with self.blob_store.read_local_file(user, flow_path) as stream:
            locator = self.blob_store.upload(user, stream, f"{info.name}_orc_flow.zip", project_name)
        logger.info("flow_reuploaded", resource_id=locator.resource_id, version=locator.version)
        return locator

    def _sync_project(self, request: ImportRequest, result: ImportResult) -> None:
        if self.project_sender is None or not is_dev_env(request.labels):
            return
        with self.catalog.transaction() as txn:
            info = txn.get_info(result.orchestrator_id)
        notice = ProjectImportNotice.from_info(info, result.version_id)
        try:
            self.project_sender.ask(notice)
        except Exception as exc:
            # the import is already committed; report instead of failing it
            logger.warning("project_sync_failed", orchestrator_id=result.orchestrator_id, error=str(exc))
            result.warnings.append(f"Project sync failed: {exc}")
