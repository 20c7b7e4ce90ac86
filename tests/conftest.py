"""
Shared pytest fixtures for orcpublish tests.

This module provides:
- An in-memory SQLite catalog per test
- A directory-backed blob store and scratch area under ``tmp_path``
- A package builder that writes a package and uploads it to the blob store
- A fully wired ImportCoordinator with local collaborators
"""

import io
import sys
import zipfile
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Ensure orcpublish package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from orcpublish.catalog.store import Catalog
from orcpublish.context.registrar import ContextRegistrar, LocalContextService
from orcpublish.core.versioning import VersionAllocator
from orcpublish.core.workspace import Workspace
from orcpublish.integration.dispatcher import IntegrationDispatcher
from orcpublish.integration.loopback import LoopbackImportProvider
from orcpublish.integration.registry import IntegrationRegistry
from orcpublish.packaging.blobstore import LocalBlobStore
from orcpublish.packaging.fetcher import PackageFetcher
from orcpublish.packaging.metadata import MetadataImporter
from orcpublish.packaging.writer import PackageWriter
from orcpublish.publish.coordinator import ImportCoordinator
from orcpublish.publish.identity import IdentityResolver
from orcpublish.publish.requests import ImportRequest

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without an explicit marker as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


def flow_zip_bytes(files: dict[str, str] | None = None) -> bytes:
    """A small flow archive."""
    files = files or {"flow.json": '{"nodes": []}'}
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


def descriptor(uuid: str = "u1", name: str = "orcA", **fields) -> dict:
    data = {"uuid": uuid, "name": name, "type": "workflow", "project_id": 10}
    data.update(fields)
    return data


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_url("sqlite:///:memory:", create=True)


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture
def context_service() -> LocalContextService:
    return LocalContextService()


@pytest.fixture
def provider() -> LoopbackImportProvider:
    return LoopbackImportProvider(first_app_id=500)


@pytest.fixture
def registry(provider: LoopbackImportProvider) -> IntegrationRegistry:
    registry = IntegrationRegistry()
    registry.register("import", provider, name="loopback")
    return registry


@pytest.fixture
def make_package(tmp_path: Path, blob_store: LocalBlobStore):
    """Build a package and upload it; returns ``(resource_id, version)``."""
    counter = iter(range(1, 10_000))

    def _make(descriptors=None, flow: bytes | None = None):
        descriptors = descriptors if descriptors is not None else [descriptor()]
        path = tmp_path / "packages" / f"package_{next(counter)}.zip"
        PackageWriter().build(descriptors, flow or flow_zip_bytes(), path)
        with path.open("rb") as fh:
            locator = blob_store.upload("tester", fh, path.name, "proj1")
        return locator.resource_id, locator.version

    return _make


@pytest.fixture
def make_request():
    def _make(resource_id: str, version: str, **overrides) -> ImportRequest:
        values = dict(
            user_name="alice",
            project_name="proj1",
            project_id=10,
            resource_id=resource_id,
            bml_version=version,
            workspace=Workspace(id=1, name="ws"),
            labels=("dev",),
        )
        values.update(overrides)
        return ImportRequest(**values)

    return _make


@pytest.fixture
def coordinator(catalog, blob_store, scratch_dir, context_service, registry) -> ImportCoordinator:
    return ImportCoordinator(
        catalog=catalog,
        blob_store=blob_store,
        fetcher=PackageFetcher(blob_store, scratch_dir),
        importer=MetadataImporter(),
        identity=IdentityResolver(clock=lambda: FIXED_NOW),
        allocator=VersionAllocator(),
        registrar=ContextRegistrar(context_service),
        dispatcher=IntegrationDispatcher(registry),
        clock=lambda: FIXED_NOW,
    )
