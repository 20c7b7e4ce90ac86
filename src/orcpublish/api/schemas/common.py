"""
Common API schemas: success envelope and RFC 7807 errors.

Every endpoint returns either :class:`SuccessResponse` or
:class:`ProblemDetail` (4xx/5xx). Pipeline failures carry their stable
numeric error code in ``ProblemDetail.code``.

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Structured error detail for field-level or nested errors."""

    code: str = Field(description="Machine-readable error code (e.g., 'REQUIRED')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error Codes:
        - ``VALIDATION_FAILED`` (400): Request or package is invalid
        - ``CONFLICT`` (409): The orchestration name is already taken (61002)
        - ``RETRIEVAL_FAILED`` (502): Package could not be fetched (61001)
        - ``UPSTREAM_FAILED`` (502): Context service or downstream system failed
        - ``INTERNAL`` (500): Unexpected server error

    Example:
        {
            "type": "about:blank",
            "title": "The same orchestration name already exists",
            "status": 409,
            "code": 61002,
            "detail": "",
            "instance": "/api/v1/orchestrators/import",
            "errors": []
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    code: int | None = Field(default=None, description="Numeric pipeline error code (61001-61007)")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(default_factory=list, description="Field-level error details")


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success envelope for single-item responses."""

    data: T = Field(description="Response payload (type varies by endpoint)")
    elapsed_ms: float = Field(default=0.0, description="Server-side processing time in milliseconds")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal warnings to display to users")
