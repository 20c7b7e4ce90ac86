"""Wire an :class:`ImportCoordinator` from :class:`PublishSettings`.

HTTP adapters are used for every collaborator whose URL is configured;
the local adapters (directory blob store, counter context service,
loopback provider) fill in the rest. Explicit arguments override both.
"""

from __future__ import annotations

from orcpublish.catalog.store import Catalog
from orcpublish.context.registrar import ContextRegistrar, ContextService, HttpContextService, LocalContextService
from orcpublish.core.logging import get_logger
from orcpublish.core.settings import PublishSettings
from orcpublish.core.versioning import VersionAllocator
from orcpublish.integration.dispatcher import IntegrationDispatcher
from orcpublish.integration.http import HttpImportProvider
from orcpublish.integration.loopback import LoopbackImportProvider
from orcpublish.integration.registry import IntegrationRegistry, any_env, has_label
from orcpublish.packaging.blobstore import BlobStore, HttpBlobStore, LocalBlobStore
from orcpublish.packaging.fetcher import PackageFetcher
from orcpublish.packaging.metadata import MetadataImporter
from orcpublish.publish.coordinator import ImportCoordinator
from orcpublish.publish.identity import IdentityResolver
from orcpublish.publish.sync import HttpProjectSender, ProjectSender

logger = get_logger(__name__)


def build_blob_store(settings: PublishSettings) -> BlobStore:
    if settings.blob_store_url:
        return HttpBlobStore(settings.blob_store_url, timeout=settings.http_timeout)
    return LocalBlobStore(settings.blob_store_dir)


def build_context_service(settings: PublishSettings) -> ContextService:
    if settings.context_service_url:
        return HttpContextService(settings.context_service_url, timeout=settings.http_timeout)
    return LocalContextService()


def parse_provider_key(key: str) -> tuple[str, str | None]:
    """Split ``"import@dev"`` into ``("import", "dev")``; a bare standard has no label."""
    standard, _, label = key.partition("@")
    return standard.strip(), (label.strip().lower() or None)


def build_registry(settings: PublishSettings) -> IntegrationRegistry:
    """One HTTP provider per configured key, or a loopback ``import`` provider.

    Keys are ``standard`` or ``standard@label``. Label-scoped bindings are
    registered first so they win over the bare standard, which then serves
    every other label set.
    """
    registry = IntegrationRegistry()
    entries = [(key, *parse_provider_key(key), url) for key, url in settings.provider_urls.items()]
    for key, standard, label, url in sorted(entries, key=lambda e: e[2] is None):
        registry.register(
            standard,
            HttpImportProvider(url, timeout=settings.http_timeout),
            when=has_label(label) if label else any_env,
            name=f"http:{key}",
        )
    if len(registry) == 0:
        registry.register("import", LoopbackImportProvider(), name="loopback")
    return registry


def build_coordinator(
    settings: PublishSettings,
    *,
    catalog: Catalog | None = None,
    blob_store: BlobStore | None = None,
    context_service: ContextService | None = None,
    registry: IntegrationRegistry | None = None,
    project_sender: ProjectSender | None = None,
) -> ImportCoordinator:
    catalog = catalog or Catalog.from_url(settings.database_url, create=True)
    blob_store = blob_store or build_blob_store(settings)
    registry = registry or build_registry(settings)
    if project_sender is None and settings.project_sync_url:
        project_sender = HttpProjectSender(settings.project_sync_url, timeout=settings.http_timeout)

    logger.debug(
        "coordinator_wired",
        blob_store=type(blob_store).__name__,
        providers=[b.name for b in registry.bindings()],
        project_sync=project_sender is not None,
    )
    return ImportCoordinator(
        catalog=catalog,
        blob_store=blob_store,
        fetcher=PackageFetcher(blob_store, settings.scratch_dir),
        importer=MetadataImporter(),
        identity=IdentityResolver(default_mode=settings.default_mode, default_way=settings.default_way),
        allocator=VersionAllocator(),
        registrar=ContextRegistrar(context_service or build_context_service(settings)),
        dispatcher=IntegrationDispatcher(registry),
        project_sender=project_sender,
    )
