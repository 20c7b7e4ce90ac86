"""Tests for orcpublish.ops.database."""

from sqlalchemy import inspect

from orcpublish.catalog.session import create_catalog_engine
from orcpublish.ops.context import OperationContext
from orcpublish.ops.database import initialize_catalog


class TestInitializeCatalog:
    def test_creates_tables(self):
        engine = create_catalog_engine("sqlite:///:memory:")
        result = initialize_catalog(OperationContext(engine=engine))
        assert result.success
        assert result.data.tables_created == ["orchestrator_info", "orchestrator_version"]
        assert "orchestrator_info" in inspect(engine).get_table_names()

    def test_dry_run(self):
        engine = create_catalog_engine("sqlite:///:memory:")
        result = initialize_catalog(OperationContext(engine=engine, dry_run=True))
        assert result.data.dry_run is True
        assert inspect(engine).get_table_names() == []

    def test_requires_engine(self):
        result = initialize_catalog(OperationContext())
        assert result.error.code == "VALIDATION_FAILED"
