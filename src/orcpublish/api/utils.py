"""
Shared API router utilities.

- ``_dc()`` converts a dataclass or dict to a plain dict
- ``_handle_error()`` converts a failed OperationResult to a ``problem_response``
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from orcpublish.api.middleware.errors import problem_response, status_for_error_code


def _dc(obj: Any) -> dict[str, Any]:
    """Convert a dataclass (or dict) to a plain dict."""
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    return obj if isinstance(obj, dict) else {}


def _handle_error(result, instance: str = ""):
    """Convert a failed ``OperationResult`` into a Problem Details response.

    The ops error code decides the HTTP status; the numeric pipeline code,
    when present, is carried in ``code``.
    """
    error = result.error
    code = error.code if error else "INTERNAL"
    numeric = error.details.get("errorCode") if error else None
    errors = None
    if error and error.details.get("fields"):
        errors = [{"code": "REQUIRED", "message": f"{f} is required", "field": f} for f in error.details["fields"]]
    return problem_response(
        status=status_for_error_code(code),
        title=error.message if error else "Operation failed",
        code=numeric,
        instance=instance,
        errors=errors,
    )
