"""End-to-end tests for the import coordinator (local collaborators, in-memory catalog)."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from conftest import descriptor, flow_zip_bytes

from orcpublish.catalog.tables import OrchestratorInfoTable, OrchestratorVersionTable
from orcpublish.context.registrar import ContextRegistrar
from orcpublish.core.errors import (
    ContextAllocationError,
    DuplicateNameError,
    IntegrationDispatchError,
    MalformedPackageError,
    RetrievalError,
)
from orcpublish.integration.dispatcher import IntegrationDispatcher
from orcpublish.integration.registry import IntegrationRegistry, dev_only, non_dev
from orcpublish.integration.loopback import LoopbackImportProvider
from orcpublish.publish.coordinator import IMPORT_COMMENT, IMPORT_SOURCE, ImportStage

pytestmark = pytest.mark.integration


def _count(catalog, table) -> int:
    with catalog.transaction() as txn:
        return txn.session.execute(select(func.count()).select_from(table)).scalar_one()


def _scratch_files(scratch_dir: Path) -> list[Path]:
    return [p for p in Path(scratch_dir).rglob("*") if p.is_file()]


class TestFirstImport:
    """alice imports orcA into proj1 with dev labels."""

    def test_end_to_end(self, coordinator, catalog, make_package, make_request, context_service):
        rid, ver = make_package([descriptor("u1", "orcA")])

        result = coordinator.run(make_request(rid, ver))

        assert result.created is True
        assert result.version == "v1"
        assert result.context_id == "ctx-1"
        assert result.app_id == 500
        assert result.valid_flag is True
        assert result.stages == [s.value for s in ImportStage]
        assert context_service.issued["ctx-1"] == ("ws", "proj1", "orcA", "v1", "alice")

        with catalog.transaction() as txn:
            info = txn.get_by_uuid("u1")
            [version] = txn.list_versions(info.id)
        assert info.id == result.orchestrator_id
        assert info.project_id == 10
        assert info.creator == "alice"
        assert info.mode == "pom_work_flow"
        assert info.way == ",pom_work_flow_DAG,"
        assert version.version == "v1"
        assert version.app_id == 500
        assert version.context_id == "ctx-1"
        assert version.valid_flag is True
        assert version.comment == IMPORT_COMMENT
        assert version.source == IMPORT_SOURCE
        assert json.loads(version.content)["newVersion"] == "v1"

    def test_import_orchestrator_returns_id(self, coordinator, catalog, make_package, make_request):
        rid, ver = make_package()
        orchestrator_id = coordinator.import_orchestrator(make_request(rid, ver))
        with catalog.transaction() as txn:
            assert txn.get_info(orchestrator_id).uuid == "u1"

    def test_flow_is_reuploaded(self, coordinator, blob_store, make_package, make_request, provider):
        flow = flow_zip_bytes({"dag.json": "[1, 2]"})
        rid, ver = make_package([descriptor("u1", "orcA")], flow=flow)

        coordinator.run(make_request(rid, ver))

        [ref] = provider.received
        assert ref.resource_id != rid
        stored = blob_store.root / ref.resource_id / ref.resource_version / "orcA_orc_flow.zip"
        assert stored.read_bytes() == flow
        assert ref.ref_project_id == 10
        assert ref.project_name == "proj1"
        assert ref.context_id == "ctx-1"

    def test_scratch_is_cleaned(self, coordinator, make_package, make_request, scratch_dir):
        rid, ver = make_package()
        coordinator.run(make_request(rid, ver))
        assert _scratch_files(scratch_dir) == []

    def test_first_descriptor_is_used(self, coordinator, catalog, make_package, make_request):
        rid, ver = make_package([descriptor("u1", "orcA"), descriptor("u2", "orcB")])
        coordinator.run(make_request(rid, ver))
        with catalog.transaction() as txn:
            assert txn.get_by_uuid("u1") is not None
            assert txn.get_by_uuid("u2") is None


class TestReimport:
    def test_idempotent_identity(self, coordinator, catalog, make_package, make_request):
        rid, ver = make_package([descriptor("u1", "orcA", description="first")])
        first = coordinator.run(make_request(rid, ver))
        rid2, ver2 = make_package([descriptor("u1", "orcA", description="second")])
        second = coordinator.run(make_request(rid2, ver2, user_name="bob"))

        assert second.orchestrator_id == first.orchestrator_id
        assert second.created is False
        assert second.version == "v2"
        assert second.context_id == "ctx-2"
        assert _count(catalog, OrchestratorInfoTable) == 1
        assert _count(catalog, OrchestratorVersionTable) == 2

        with catalog.transaction() as txn:
            info = txn.get_info(first.orchestrator_id)
        assert info.description == "second"
        assert info.creator == "alice"
        assert info.update_user == "bob"

    def test_versions_are_monotonic_across_environments(self, coordinator, make_package, make_request):
        rid, ver = make_package()
        versions = [
            coordinator.run(make_request(rid, ver, labels=labels)).version
            for labels in (("dev",), ("prod",), ("dev",), ("prod",))
        ]
        assert versions == ["v1", "v2", "v3", "v4"]

    def test_unparseable_previous_version_falls_back_to_initial(
        self, coordinator, catalog, make_package, make_request
    ):
        rid, ver = make_package()
        first = coordinator.run(make_request(rid, ver))
        with catalog.transaction() as txn:
            [row] = txn.list_versions(first.orchestrator_id)
            row.version = "release"
            txn.update_version(row)

        second = coordinator.run(make_request(rid, ver))

        assert second.version == "v1"
        assert _count(catalog, OrchestratorVersionTable) == 2

    def test_reimport_into_other_project_keeps_catalog_row(
        self, coordinator, catalog, make_package, make_request
    ):
        rid, ver = make_package([descriptor("u1", "orcA")])
        first = coordinator.run(make_request(rid, ver))

        second = coordinator.run(make_request(rid, ver, project_id=30, project_name="proj3"))

        assert second.created is False
        assert second.orchestrator_id == first.orchestrator_id
        with catalog.transaction() as txn:
            info = txn.get_info(first.orchestrator_id)
            versions = txn.list_versions(info.id)
            owner = txn.find_uuid_by_project_and_name(10, "orcA")
        assert info.project_id == 10
        assert owner == "u1"
        assert [(v.version, v.project_id) for v in versions] == [("v1", 10), ("v2", 30)]


class TestNameCollision:
    def test_rejected_without_mutation(
        self, coordinator, catalog, make_package, make_request, provider, context_service, scratch_dir
    ):
        rid, ver = make_package([descriptor("u1", "orcA", description="original")])
        coordinator.run(make_request(rid, ver))

        rid2, ver2 = make_package([descriptor("u2", "orcA", description="intruder")])
        with pytest.raises(DuplicateNameError) as excinfo:
            coordinator.run(make_request(rid2, ver2))

        error = excinfo.value
        assert error.code == 61002
        assert error.message == "The same orchestration name already exists"
        assert error.context.stage == ImportStage.PARSED.value
        assert error.context.user == "alice"
        assert _count(catalog, OrchestratorInfoTable) == 1
        assert _count(catalog, OrchestratorVersionTable) == 1
        assert len(provider.received) == 1
        assert len(context_service.issued) == 1
        with catalog.transaction() as txn:
            assert txn.get_by_uuid("u1").description == "original"
            assert txn.get_by_uuid("u2") is None
        assert _scratch_files(scratch_dir) == []


class TestFork:
    def test_fork_creates_new_orchestrator(self, coordinator, catalog, make_package, make_request):
        rid, ver = make_package([descriptor("u1", "orcA")])
        original = coordinator.run(make_request(rid, ver))

        forked = coordinator.run(make_request(rid, ver, copy_project_id=20, copy_project_name="proj2"))

        assert forked.created is True
        assert forked.orchestrator_id != original.orchestrator_id
        assert forked.uuid != "u1"
        assert forked.version == "v1"
        with catalog.transaction() as txn:
            copy = txn.get_info(forked.orchestrator_id)
            source = txn.get_by_uuid("u1")
        assert copy.project_id == 20
        assert copy.name == "orcA"
        assert source.project_id == 10

    def test_second_fork_into_same_project_collides(self, coordinator, make_package, make_request):
        rid, ver = make_package([descriptor("u1", "orcA")])
        fork = dict(copy_project_id=20, copy_project_name="proj2")
        coordinator.run(make_request(rid, ver, **fork))
        with pytest.raises(DuplicateNameError):
            coordinator.run(make_request(rid, ver, **fork))

    def test_fork_context_uses_target_project(self, coordinator, make_package, make_request, context_service):
        rid, ver = make_package()
        result = coordinator.run(make_request(rid, ver, copy_project_id=20, copy_project_name="proj2"))
        assert context_service.issued[result.context_id][1] == "proj2"


class TestValidity:
    def test_prod_versions_start_invalid(self, coordinator, catalog, make_package, make_request):
        rid, ver = make_package()
        result = coordinator.run(make_request(rid, ver, labels=("prod",)))
        assert result.valid_flag is False
        with catalog.transaction() as txn:
            [version] = txn.list_versions(result.orchestrator_id)
        assert version.valid_flag is False

    def test_env_label_pair(self, coordinator, make_package, make_request):
        rid, ver = make_package()
        assert coordinator.run(make_request(rid, ver, labels=("env=dev",))).valid_flag is True


class TestAtomicity:
    """Any failure leaves no catalog trace and no scratch files."""

    def _coordinator_with(self, coordinator, provider):
        registry = IntegrationRegistry()
        registry.register("import", provider)
        coordinator.dispatcher = IntegrationDispatcher(registry)
        return coordinator

    def test_dispatch_failure_rolls_back(self, coordinator, catalog, make_package, make_request, scratch_dir):
        failing = MagicMock()
        failing.import_ref.side_effect = RuntimeError("engine down")
        coordinator = self._coordinator_with(coordinator, failing)
        rid, ver = make_package()

        with pytest.raises(IntegrationDispatchError) as excinfo:
            coordinator.run(make_request(rid, ver))

        assert excinfo.value.context.stage == ImportStage.VERSION_ROW_CREATED.value
        assert _count(catalog, OrchestratorInfoTable) == 0
        assert _count(catalog, OrchestratorVersionTable) == 0
        assert _scratch_files(scratch_dir) == []

    def test_context_allocation_failure_rolls_back(
        self, coordinator, catalog, make_package, make_request, provider, scratch_dir
    ):
        service = MagicMock()
        service.create_context_id.side_effect = ConnectionError("context service down")
        coordinator.registrar = ContextRegistrar(service)
        rid, ver = make_package()

        with pytest.raises(ContextAllocationError) as excinfo:
            coordinator.run(make_request(rid, ver))

        assert excinfo.value.context.stage == ImportStage.VERSION_ALLOCATED.value
        assert _count(catalog, OrchestratorInfoTable) == 0
        assert _count(catalog, OrchestratorVersionTable) == 0
        assert provider.received == []
        assert _scratch_files(scratch_dir) == []

    def test_failed_update_keeps_previous_state(self, coordinator, catalog, make_package, make_request):
        rid, ver = make_package([descriptor("u1", "orcA", description="v1 text")])
        coordinator.run(make_request(rid, ver))

        failing = MagicMock()
        failing.import_ref.side_effect = RuntimeError("engine down")
        coordinator = self._coordinator_with(coordinator, failing)
        rid2, ver2 = make_package([descriptor("u1", "orcA", description="v2 text")])
        with pytest.raises(IntegrationDispatchError):
            coordinator.run(make_request(rid2, ver2))

        with catalog.transaction() as txn:
            info = txn.get_by_uuid("u1")
            versions = txn.list_versions(info.id)
        assert info.description == "v1 text"
        assert [v.version for v in versions] == ["v1"]

    def test_cancellation_rolls_back(self, coordinator, catalog, make_package, make_request, scratch_dir):
        interrupting = MagicMock()
        interrupting.import_ref.side_effect = KeyboardInterrupt
        coordinator = self._coordinator_with(coordinator, interrupting)
        rid, ver = make_package()

        with pytest.raises(KeyboardInterrupt):
            coordinator.run(make_request(rid, ver))

        assert _count(catalog, OrchestratorInfoTable) == 0
        assert _scratch_files(scratch_dir) == []

    def test_missing_package(self, coordinator, catalog, make_request):
        with pytest.raises(RetrievalError) as excinfo:
            coordinator.run(make_request("missing", "v000001"))
        assert excinfo.value.context.resource_id == "missing"
        assert excinfo.value.context.stage is None
        assert _count(catalog, OrchestratorInfoTable) == 0

    def test_malformed_package(self, coordinator, catalog, blob_store, make_request, tmp_path):
        bogus = tmp_path / "bogus.zip"
        bogus.write_bytes(b"definitely not a zip")
        with bogus.open("rb") as fh:
            locator = blob_store.upload("alice", fh, "bogus.zip", "proj1")

        with pytest.raises(MalformedPackageError):
            coordinator.run(make_request(locator.resource_id, locator.version))
        assert _count(catalog, OrchestratorInfoTable) == 0


class TestProviderSelection:
    def test_labels_pick_the_provider(self, coordinator, make_package, make_request):
        dev, prod = LoopbackImportProvider(first_app_id=1), LoopbackImportProvider(first_app_id=900)
        registry = IntegrationRegistry()
        registry.register("import", dev, when=dev_only)
        registry.register("import", prod, when=non_dev)
        coordinator.dispatcher = IntegrationDispatcher(registry)
        rid, ver = make_package()

        assert coordinator.run(make_request(rid, ver, labels=("prod",))).app_id == 900
        assert coordinator.run(make_request(rid, ver, labels=("dev",))).app_id == 1
