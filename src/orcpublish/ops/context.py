"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument. The context carries the wired import coordinator (or the catalog
engine for database operations), the caller identity, the dry-run flag and
free-form metadata.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.engine import Engine

from orcpublish.publish.coordinator import ImportCoordinator


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        coordinator: Import coordinator used by import operations.
        engine: Catalog engine used by database operations.
        request_id: Unique ID for this invocation (auto-generated).
        caller: Origin of the request: ``"api"``, ``"cli"`` or ``"sdk"``.
        user: Optional authenticated user identifier.
        dry_run: When ``True``, operations validate and preview only.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    coordinator: ImportCoordinator | None = None
    engine: Engine | None = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    user: str | None = None
    dry_run: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
