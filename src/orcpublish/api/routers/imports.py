"""
Import router: publish an orchestrator package into a project.

POST /orchestrators/import

Tags:
    orcpublish, api, import, orchestrator

Doc-Types:
    api-reference
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from orcpublish.api.deps import OpContext
from orcpublish.api.schemas.common import SuccessResponse
from orcpublish.api.schemas.imports import ImportAcceptedSchema, ImportRequestSchema
from orcpublish.api.utils import _dc, _handle_error
from orcpublish.ops.imports import import_orchestrator as _import

router = APIRouter(prefix="/orchestrators")


@router.post("/import", response_model=SuccessResponse[ImportAcceptedSchema])
def import_orchestrator(
    body: ImportRequestSchema,
    ctx: OpContext,
    request: Request,
    dry_run: bool = Query(False, alias="dryRun", description="Validate the request without importing"),
):
    """Import the package ``resourceId``/``bmlVersion`` into the target project.

    Example:
        POST /api/v1/orchestrators/import
        {
            "userName": "alice", "projectName": "proj1", "projectId": 7,
            "resourceId": "r1", "bmlVersion": "v000001",
            "labels": ["dev"], "workspace": {"id": 1, "name": "ws"}
        }

        Response:
        {"data": {"orchestratorId": 42, "version": "v1", ...}}

    Raises:
        409 CONFLICT (61002): Another orchestrator owns the name in the project.
    """
    ctx.dry_run = dry_run
    result = _import(ctx, body.to_request())
    if not result.success:
        return _handle_error(result, instance=str(request.url))
    return SuccessResponse(
        data=ImportAcceptedSchema(**_dc(result.data)),
        elapsed_ms=result.elapsed_ms,
        warnings=result.warnings,
    )
