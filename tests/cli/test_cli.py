"""Tests for the orcpublish CLI."""

import json

import pytest
import structlog
from typer.testing import CliRunner

from conftest import descriptor, flow_zip_bytes

from orcpublish.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("ORCPUB_DATABASE_URL", f"sqlite:///{tmp_path / 'catalog.db'}")
    monkeypatch.setenv("ORCPUB_BLOB_STORE_DIR", str(tmp_path / "blobs"))
    monkeypatch.setenv("ORCPUB_SCRATCH_DIR", str(tmp_path / "scratch"))
    monkeypatch.setenv("ORCPUB_LOG_LEVEL", "WARNING")
    monkeypatch.delenv("ORCPUB_BLOB_STORE_URL", raising=False)
    monkeypatch.delenv("ORCPUB_PROVIDER_URLS", raising=False)
    yield
    structlog.reset_defaults()


@pytest.fixture
def package(tmp_path):
    def _make(uuid: str, name: str = "orcA"):
        meta = tmp_path / f"{uuid}.json"
        meta.write_text(json.dumps([descriptor(uuid, name)]))
        flow = tmp_path / "flow.zip"
        flow.write_bytes(flow_zip_bytes())
        out = tmp_path / f"{uuid}.zip"
        result = runner.invoke(app, ["pack", str(meta), str(flow), str(out)])
        assert result.exit_code == 0, result.output
        return out

    return _make


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "orcpublish" in result.output


class TestDbInit:
    def test_dry_run(self):
        result = runner.invoke(app, ["db", "init", "--dry-run", "--json"])
        assert result.exit_code == 0, result.output
        assert "orchestrator_version" in result.output

    def test_creates_database_file(self, tmp_path):
        db = tmp_path / "other.db"
        result = runner.invoke(app, ["db", "init", "--database", f"sqlite:///{db}"])
        assert result.exit_code == 0, result.output
        assert db.exists()


class TestPack:
    def test_pack_writes_zip(self, package):
        assert package("u1").exists()

    def test_pack_rejects_bad_json(self, tmp_path):
        meta = tmp_path / "meta.json"
        meta.write_text("{nope")
        flow = tmp_path / "flow.zip"
        flow.write_bytes(b"x")
        result = runner.invoke(app, ["pack", str(meta), str(flow), str(tmp_path / "o.zip")])
        assert result.exit_code == 1


class TestImport:
    def _import(self, path, *extra):
        return runner.invoke(
            app,
            [
                "import",
                "--user", "alice",
                "--project", "proj1",
                "--project-id", "10",
                "--workspace", "ws",
                "--package", str(path),
                "--label", "dev",
                "--json",
                *extra,
            ],
        )

    def test_import_package(self, package):
        result = self._import(package("u1"))
        assert result.exit_code == 0, result.output
        assert '"version": "v1"' in result.output
        assert '"valid_flag": true' in result.output

    def test_reimport_bumps_version(self, package):
        path = package("u1")
        self._import(path)
        result = self._import(path)
        assert result.exit_code == 0, result.output
        assert '"version": "v2"' in result.output

    def test_name_conflict_exits_1(self, package):
        self._import(package("u1"))
        result = self._import(package("u2"))
        assert result.exit_code == 1
        assert "Error (61002): The same orchestration name already exists" in result.output

    def test_requires_package_or_locator(self):
        result = runner.invoke(app, ["import", "--user", "alice", "--project", "proj1"])
        assert result.exit_code == 2
