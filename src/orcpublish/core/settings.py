"""Settings for the orchestrator import pipeline.

Configuration should be explicit, validated, and environment-driven.
``PublishSettings`` reads ``ORCPUB_*`` environment variables (and ``.env``)
and decides which concrete adapters :func:`orcpublish.bootstrap.build_coordinator`
wires: HTTP adapters when a service URL is configured, local adapters
otherwise.

Examples:
    >>> from orcpublish.core.settings import PublishSettings
    >>> settings = PublishSettings(database_url="sqlite:///:memory:")
    >>> settings.default_mode
    'pom_work_flow'

Tags:
    settings, configuration, pydantic, environment, orcpublish

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PublishSettings(BaseSettings):
    """Settings shared by the API, the CLI and the coordinator.

    Fields
    ──────
    database_url        : SQLAlchemy URL of the catalog
    scratch_dir         : Root for downloaded/unpacked packages
    blob_store_url      : Remote blob store; ``None`` → local store
    blob_store_dir      : Directory backing the local blob store
    context_service_url : Remote context-id service; ``None`` → local counter
    project_sync_url    : Project service notified of dev imports; ``None`` → off
    provider_urls       : ``standard`` or ``standard@label`` → downstream import URL
    http_timeout        : Seconds for every outbound HTTP call
    default_mode / way  : Applied to packages from older formats
    """

    model_config = SettingsConfigDict(
        env_prefix="ORCPUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ── Catalog ──────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///orcpublish.db", description="Catalog URL")

    # ── Filesystem ───────────────────────────────────────────────
    scratch_dir: Path = Field(
        default_factory=lambda: Path.home() / ".orcpublish" / "scratch",
        description="Scratch area for downloaded packages",
    )
    blob_store_dir: Path = Field(
        default_factory=lambda: Path.home() / ".orcpublish" / "blobs",
        description="Directory backing the local blob store",
    )

    # ── Collaborators ────────────────────────────────────────────
    blob_store_url: str | None = None
    context_service_url: str | None = None
    project_sync_url: str | None = None
    provider_urls: dict[str, str] = Field(default_factory=dict)
    http_timeout: float = 30.0

    # ── Package defaults (older package formats) ─────────────────
    default_mode: str = "pom_work_flow"
    default_way: str = ",pom_work_flow_DAG,"

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── API ──────────────────────────────────────────────────────
    api_prefix: str = "/api/v1"
    api_title: str = "orcpublish API"


@lru_cache(maxsize=1)
def get_settings() -> PublishSettings:
    """Cached settings — loaded once per process."""
    return PublishSettings()
