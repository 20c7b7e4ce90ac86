"""Relational catalog of orchestrators and their versions (SQLAlchemy 2.0).

Modules
-------
base        CatalogBase (declarative base)
session     Engine factory, CatalogSession, init_catalog
tables      OrchestratorInfoTable, OrchestratorVersionTable
models      OrchestratorInfo, OrchestratorVersion dataclasses
store       Catalog + CatalogTransaction
"""

from orcpublish.catalog.models import OrchestratorInfo, OrchestratorVersion
from orcpublish.catalog.session import (
    CatalogSession,
    catalog_session_factory,
    create_catalog_engine,
    init_catalog,
)
from orcpublish.catalog.store import Catalog, CatalogTransaction

__all__ = [
    "Catalog",
    "CatalogSession",
    "CatalogTransaction",
    "OrchestratorInfo",
    "OrchestratorVersion",
    "catalog_session_factory",
    "create_catalog_engine",
    "init_catalog",
]
