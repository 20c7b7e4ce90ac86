"""
Import operations.

:func:`import_orchestrator` validates an :class:`ImportRequest`, runs it
through the context's :class:`ImportCoordinator` and turns the outcome into
an :class:`OperationResult`. Pipeline errors never escape: each
:class:`PublishError` subclass maps to an ops error code, and the stable
numeric code travels in ``error.details["errorCode"]``.
"""

from __future__ import annotations

from orcpublish.core.errors import (
    ContextAllocationError,
    DuplicateNameError,
    IntegrationDispatchError,
    MalformedPackageError,
    PublishError,
    RetrievalError,
    TransactionError,
    VersionFormatError,
)
from orcpublish.core.logging import get_logger
from orcpublish.ops.context import OperationContext
from orcpublish.ops.responses import ImportAccepted
from orcpublish.ops.result import OperationResult, start_timer
from orcpublish.publish.requests import ImportRequest

logger = get_logger(__name__)

_ERROR_CODES: list[tuple[type[PublishError], str]] = [
    (DuplicateNameError, "CONFLICT"),
    (MalformedPackageError, "VALIDATION_FAILED"),
    (VersionFormatError, "VALIDATION_FAILED"),
    (RetrievalError, "RETRIEVAL_FAILED"),
    (ContextAllocationError, "UPSTREAM_FAILED"),
    (IntegrationDispatchError, "UPSTREAM_FAILED"),
    (TransactionError, "INTERNAL"),
]


def error_code_for(exc: PublishError) -> str:
    """Ops error code for a pipeline exception."""
    for error_type, code in _ERROR_CODES:
        if isinstance(exc, error_type):
            return code
    return "INTERNAL"


def _missing_fields(request: ImportRequest) -> list[str]:
    required = {
        "userName": request.user_name,
        "projectName": request.project_name,
        "resourceId": request.resource_id,
        "bmlVersion": request.bml_version,
        "workspace.name": request.workspace.name,
    }
    return [name for name, value in required.items() if not (value or "").strip()]


def import_orchestrator(
    ctx: OperationContext,
    request: ImportRequest,
) -> OperationResult[ImportAccepted]:
    """Import the orchestrator package referenced by *request*."""
    timer = start_timer()

    missing = _missing_fields(request)
    if missing:
        return OperationResult.fail(
            "VALIDATION_FAILED",
            f"Missing required fields: {', '.join(missing)}",
            details={"fields": missing},
            elapsed_ms=timer.elapsed_ms,
        )

    if ctx.dry_run:
        return OperationResult.ok(
            ImportAccepted(orchestrator_id=None, dry_run=True),
            elapsed_ms=timer.elapsed_ms,
        )

    if ctx.coordinator is None:
        return OperationResult.fail(
            "INTERNAL",
            "No import coordinator configured",
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        result = ctx.coordinator.run(request)
    except PublishError as exc:
        details: dict[str, object] = {"errorCode": exc.code}
        details.update(exc.context.to_dict())
        return OperationResult.fail(
            error_code_for(exc),
            exc.message,
            category=exc.category,
            details=details,
            retryable=exc.retryable,
            elapsed_ms=timer.elapsed_ms,
            metadata={"request_id": ctx.request_id},
        )

    return OperationResult.ok(
        ImportAccepted(
            orchestrator_id=result.orchestrator_id,
            uuid=result.uuid,
            name=result.name,
            created=result.created,
            version=result.version,
            version_id=result.version_id,
            valid_flag=result.valid_flag,
            context_id=result.context_id,
            app_id=result.app_id,
            stages=list(result.stages),
        ),
        warnings=list(result.warnings),
        elapsed_ms=timer.elapsed_ms,
        metadata={"request_id": ctx.request_id},
    )
