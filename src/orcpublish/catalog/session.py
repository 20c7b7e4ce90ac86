"""SQLAlchemy engine and session factories for the catalog.

* ``create_catalog_engine``   -- engine with SQLite pragmas / pool settings
* ``CatalogSession``          -- ``Session`` with ``expire_on_commit=False``
* ``catalog_session_factory`` -- ``sessionmaker`` producing ``CatalogSession``
* ``init_catalog``            -- create both catalog tables

Tags:
    orcpublish, catalog, sqlalchemy, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from orcpublish.catalog.base import CatalogBase


def create_catalog_engine(
    url: str = "sqlite:///orcpublish.db",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    pool_timeout: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.)
    echo:
        If ``True``, log all SQL to stdout.
    pool_size, max_overflow, pool_timeout:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        # an in-memory database only lives as long as its single connection
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs.setdefault("poolclass", StaticPool)

        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow
    if pool_timeout is not None:
        pool_kwargs["pool_timeout"] = pool_timeout

    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class CatalogSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Prevents lazy-load surprises after commit.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def catalog_session_factory(engine: Engine) -> sessionmaker[CatalogSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``CatalogSession`` instances."""
    return sessionmaker(bind=engine, class_=CatalogSession)


def init_catalog(engine: Engine) -> None:
    """Create the catalog tables if they do not exist."""
    # registers the mapped tables on CatalogBase.metadata
    from orcpublish.catalog import tables  # noqa: F401

    CatalogBase.metadata.create_all(engine)
