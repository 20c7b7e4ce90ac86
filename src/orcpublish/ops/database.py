"""
Catalog database operations.

Thin wrappers around :func:`orcpublish.catalog.session.init_catalog`.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from orcpublish.catalog.base import CatalogBase
from orcpublish.catalog.session import init_catalog
from orcpublish.core.logging import get_logger
from orcpublish.ops.context import OperationContext
from orcpublish.ops.responses import CatalogInitResult
from orcpublish.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def _catalog_table_names() -> list[str]:
    # registers the tables on the metadata
    import orcpublish.catalog.tables  # noqa: F401

    return sorted(CatalogBase.metadata.tables)


def initialize_catalog(ctx: OperationContext) -> OperationResult[CatalogInitResult]:
    """Create the catalog tables (idempotent)."""
    timer = start_timer()
    table_names = _catalog_table_names()

    if ctx.dry_run:
        return OperationResult.ok(
            CatalogInitResult(tables_created=table_names, dry_run=True),
            elapsed_ms=timer.elapsed_ms,
        )
    if ctx.engine is None:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            "No catalog engine configured",
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        init_catalog(ctx.engine)
    except SQLAlchemyError as exc:
        logger.exception("op_failed", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to create tables: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )
    return OperationResult.ok(CatalogInitResult(tables_created=table_names), elapsed_ms=timer.elapsed_ms)
