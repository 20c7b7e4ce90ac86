"""
Catalog store — transactional access to orchestrator info and versions.

The store hands out an explicit :class:`CatalogTransaction` handle. Every
catalog read and write of one import goes through that handle; it is
committed once at the end of the pipeline and rolled back on any error that
propagates out of the ``with`` block.

Architecture:
    ::

        Catalog(session_factory)
            │
            └── transaction() ──► CatalogTransaction (one Session)
                    find_uuid_by_project_and_name(project_id, name)
                    get_by_uuid(uuid)
                    insert_info(info) / update_info(info)
                    insert_version(v) / update_version(v)
                    get_latest_version(orchestrator_id, only_valid)
                    commit() / rollback()

Integrity violations are translated at flush time: the ``(project_id, name)``
index becomes :class:`DuplicateNameError`, anything else
:class:`TransactionError`. The database, not the resolver's pre-check, has
the final word on name uniqueness.

Examples:
    >>> catalog = Catalog.from_url("sqlite:///:memory:", create=True)
    >>> with catalog.transaction() as txn:
    ...     info = txn.insert_info(OrchestratorInfo(uuid="u1", name="orcA", project_id=10))
    >>> info.id
    1

Tags:
    orcpublish, catalog, repository, transaction, sqlalchemy

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, fields

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from orcpublish.catalog.models import MUTABLE_INFO_FIELDS, OrchestratorInfo, OrchestratorVersion
from orcpublish.catalog.session import catalog_session_factory, create_catalog_engine, init_catalog
from orcpublish.catalog.tables import NAME_INDEX, OrchestratorInfoTable, OrchestratorVersionTable
from orcpublish.core.errors import DuplicateNameError, TransactionError
from orcpublish.core.logging import get_logger

logger = get_logger(__name__)

_INFO_FIELDS = tuple(f.name for f in fields(OrchestratorInfo))
_VERSION_FIELDS = tuple(f.name for f in fields(OrchestratorVersion))


def _is_name_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    if NAME_INDEX in message:
        return True
    # SQLite names the columns instead of the index
    return "orchestrator_info.project_id" in message and "orchestrator_info.name" in message


def _info_from_row(row: OrchestratorInfoTable) -> OrchestratorInfo:
    return OrchestratorInfo(**{name: getattr(row, name) for name in _INFO_FIELDS})


def _version_from_row(row: OrchestratorVersionTable) -> OrchestratorVersion:
    version = OrchestratorVersion(**{name: getattr(row, name) for name in _VERSION_FIELDS})
    version.valid_flag = bool(row.valid_flag)
    return version


class CatalogTransaction:
    """Transaction handle over one ORM session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # -- Info rows ---------------------------------------------------------

    def find_uuid_by_project_and_name(self, project_id: int | None, name: str) -> str | None:
        """uuid of the non-deleted orchestrator named *name* in *project_id*."""
        stmt = select(OrchestratorInfoTable.uuid).where(
            OrchestratorInfoTable.project_id == project_id,
            OrchestratorInfoTable.name == name,
            OrchestratorInfoTable.is_deleted == 0,
        )
        return self._execute(lambda: self._session.execute(stmt).scalars().first())

    def get_by_uuid(self, uuid: str) -> OrchestratorInfo | None:
        stmt = select(OrchestratorInfoTable).where(
            OrchestratorInfoTable.uuid == uuid,
            OrchestratorInfoTable.is_deleted == 0,
        )
        row = self._execute(lambda: self._session.execute(stmt).scalars().first())
        return _info_from_row(row) if row is not None else None

    def get_info(self, orchestrator_id: int) -> OrchestratorInfo | None:
        row = self._execute(lambda: self._session.get(OrchestratorInfoTable, orchestrator_id))
        return _info_from_row(row) if row is not None else None

    def insert_info(self, info: OrchestratorInfo) -> OrchestratorInfo:
        """Insert *info* and write the generated surrogate id back onto it."""
        values = {k: v for k, v in asdict(info).items() if k != "id"}
        row = OrchestratorInfoTable(**values)
        self._session.add(row)
        self._flush(info.name, info.project_id)
        info.id = row.id
        return info

    def update_info(self, info: OrchestratorInfo) -> OrchestratorInfo:
        """Copy the mutable fields of *info* onto the stored row ``info.id``."""
        row = self._execute(lambda: self._session.get(OrchestratorInfoTable, info.id))
        if row is None:
            raise TransactionError(f"Orchestrator {info.id} does not exist")
        for name in MUTABLE_INFO_FIELDS:
            setattr(row, name, getattr(info, name))
        row.update_user = info.update_user
        row.update_time = info.update_time
        self._flush(row.name, row.project_id)
        return _info_from_row(row)

    # -- Version rows ------------------------------------------------------

    def insert_version(self, version: OrchestratorVersion) -> OrchestratorVersion:
        values = {k: v for k, v in asdict(version).items() if k != "id"}
        values["valid_flag"] = int(version.valid_flag)
        row = OrchestratorVersionTable(**values)
        self._session.add(row)
        self._flush()
        version.id = row.id
        return version

    def update_version(self, version: OrchestratorVersion) -> OrchestratorVersion:
        row = self._execute(lambda: self._session.get(OrchestratorVersionTable, version.id))
        if row is None:
            raise TransactionError(f"Orchestrator version {version.id} does not exist")
        for name in _VERSION_FIELDS:
            if name != "id":
                setattr(row, name, getattr(version, name))
        row.valid_flag = int(version.valid_flag)
        self._flush()
        return version

    def get_latest_version(self, orchestrator_id: int, only_valid: bool = False) -> str | None:
        """Most recently inserted version token of *orchestrator_id*."""
        stmt = (
            select(OrchestratorVersionTable.version)
            .where(OrchestratorVersionTable.orchestrator_id == orchestrator_id)
            .order_by(OrchestratorVersionTable.id.desc())
            .limit(1)
        )
        if only_valid:
            stmt = stmt.where(OrchestratorVersionTable.valid_flag == 1)
        return self._execute(lambda: self._session.execute(stmt).scalars().first())

    def list_versions(self, orchestrator_id: int) -> list[OrchestratorVersion]:
        stmt = (
            select(OrchestratorVersionTable)
            .where(OrchestratorVersionTable.orchestrator_id == orchestrator_id)
            .order_by(OrchestratorVersionTable.id)
        )
        rows = self._execute(lambda: self._session.execute(stmt).scalars().all())
        return [_version_from_row(r) for r in rows]

    # -- Transaction -------------------------------------------------------

    def commit(self) -> None:
        self._flush()
        self._execute(self._session.commit)

    def rollback(self) -> None:
        self._session.rollback()

    # -- Internals ---------------------------------------------------------

    def _flush(self, name: str | None = None, project_id: int | None = None) -> None:
        try:
            self._session.flush()
        except IntegrityError as exc:
            if _is_name_violation(exc):
                raise DuplicateNameError(name, project_id=project_id, cause=exc) from exc
            raise TransactionError(f"Catalog integrity violation: {exc.orig}", cause=exc) from exc
        except SQLAlchemyError as exc:
            raise TransactionError(f"Catalog write failed: {exc}", cause=exc) from exc

    def _execute(self, fn):
        try:
            return fn()
        except IntegrityError as exc:
            if _is_name_violation(exc):
                raise DuplicateNameError(cause=exc) from exc
            raise TransactionError(f"Catalog integrity violation: {exc.orig}", cause=exc) from exc
        except SQLAlchemyError as exc:
            raise TransactionError(f"Catalog access failed: {exc}", cause=exc) from exc


class Catalog:
    """Entry point to the catalog; one :class:`CatalogTransaction` per import."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_engine(cls, engine: Engine, *, create: bool = False) -> Catalog:
        if create:
            init_catalog(engine)
        return cls(catalog_session_factory(engine))

    @classmethod
    def from_url(cls, url: str, *, create: bool = False, **engine_kwargs) -> Catalog:
        return cls.from_engine(create_catalog_engine(url, **engine_kwargs), create=create)

    @contextmanager
    def transaction(self) -> Iterator[CatalogTransaction]:
        """Yield a transaction; commit on normal exit, roll back otherwise."""
        session = self._session_factory()
        txn = CatalogTransaction(session)
        try:
            yield txn
            txn.commit()
        except BaseException as exc:
            session.rollback()
            logger.debug("catalog_transaction_rolled_back", error=type(exc).__name__)
            raise
        finally:
            session.close()

