"""Catalog table definitions — orchestrator info and orchestrator versions.

``(project_id, name)`` and ``uuid`` are unique among non-deleted info rows.
Both are partial unique indexes so that concurrent importers racing for the
same name are decided by the database at flush/commit time.

Tags:
    orcpublish, catalog, sqlalchemy, tables

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orcpublish.catalog.base import CatalogBase

_NOT_DELETED = text("is_deleted = 0")

NAME_INDEX = "uq_orchestrator_info_project_name"
UUID_INDEX = "uq_orchestrator_info_uuid"


class OrchestratorInfoTable(CatalogBase):
    __tablename__ = "orchestrator_info"
    __table_args__ = (
        Index(
            NAME_INDEX,
            "project_id",
            "name",
            unique=True,
            sqlite_where=_NOT_DELETED,
            postgresql_where=_NOT_DELETED,
        ),
        Index(
            UUID_INDEX,
            "uuid",
            unique=True,
            sqlite_where=_NOT_DELETED,
            postgresql_where=_NOT_DELETED,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    project_id: Mapped[int | None] = mapped_column(Integer)
    workspace_id: Mapped[int | None] = mapped_column(Integer)
    type: Mapped[str | None] = mapped_column(Text)
    second_type: Mapped[str | None] = mapped_column(Text)
    app_conn_name: Mapped[str | None] = mapped_column(Text)
    mode: Mapped[str | None] = mapped_column(Text)
    way: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    uses: Mapped[str | None] = mapped_column(Text)
    creator: Mapped[str | None] = mapped_column(Text)
    create_time: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    update_user: Mapped[str | None] = mapped_column(Text)
    update_time: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    is_deleted: Mapped[bool] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    # --- relationships ---
    versions: Mapped[list[OrchestratorVersionTable]] = relationship(
        "OrchestratorVersionTable", back_populates="orchestrator"
    )


class OrchestratorVersionTable(CatalogBase):
    __tablename__ = "orchestrator_version"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    orchestrator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orchestrator_info.id"), nullable=False, index=True
    )
    version: Mapped[str] = mapped_column(Text, nullable=False)
    app_id: Mapped[int | None] = mapped_column(Integer)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    context_id: Mapped[str | None] = mapped_column(Text)
    valid_flag: Mapped[bool] = mapped_column(Integer, nullable=False, default=0)
    project_id: Mapped[int | None] = mapped_column(Integer)
    updater: Mapped[str | None] = mapped_column(Text)
    update_time: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    comment: Mapped[str | None] = mapped_column(Text)
    source: Mapped[str | None] = mapped_column(Text)

    # --- relationships ---
    orchestrator: Mapped[OrchestratorInfoTable] = relationship(
        "OrchestratorInfoTable", back_populates="versions"
    )
