"""
FastAPI dependency injection: shared singletons and per-request factories.

Usage in routers::

    from orcpublish.api.deps import OpContext

    @router.post("/orchestrators/import")
    def import_orchestrator(body: ImportRequestSchema, ctx: OpContext):
        ...

Tags:
    orcpublish, api, dependency-injection, OpContext
"""

from __future__ import annotations

import threading
import uuid
from typing import Annotated

from fastapi import Depends, Request

from orcpublish.bootstrap import build_coordinator
from orcpublish.core.settings import PublishSettings, get_settings
from orcpublish.ops.context import OperationContext
from orcpublish.publish.coordinator import ImportCoordinator

_coordinator_lock = threading.Lock()


def get_coordinator(
    request: Request,
    settings: Annotated[PublishSettings, Depends(get_settings)],
) -> ImportCoordinator:
    """The app-wide coordinator, wired from settings on first use."""
    state = request.app.state
    if getattr(state, "coordinator", None) is None:
        with _coordinator_lock:
            if getattr(state, "coordinator", None) is None:
                state.coordinator = build_coordinator(settings)
    return state.coordinator


def get_operation_context(
    request: Request,
    coordinator: Annotated[ImportCoordinator, Depends(get_coordinator)],
) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return OperationContext(
        coordinator=coordinator,
        request_id=request_id,
        caller="api",
    )


Settings = Annotated[PublishSettings, Depends(get_settings)]
OpContext = Annotated[OperationContext, Depends(get_operation_context)]
