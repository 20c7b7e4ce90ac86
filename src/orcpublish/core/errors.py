"""
Structured error types for the orchestrator import pipeline.

Every failure the pipeline can surface is a :class:`PublishError` subclass
carrying a stable numeric ``code``, an :class:`ErrorCategory`, a retry flag,
structured :class:`ErrorContext` and an optional chained cause.

Manifesto:
    - **Typed Error Hierarchy:** One error type per failure domain
    - **Stable Codes:** Callers branch on ``code``, never on message text
    - **Rich Context:** Errors carry user, project and resource for diagnosis
    - **Error Chaining:** Preserve the original exception as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        PublishError                           │
        │        (code, category, retryable, context, cause)           │
        ├──────────────────────────────────────────────────────────────┤
        │  RetrievalError          61001  STORAGE                      │
        │  DuplicateNameError      61002  CONFLICT (user-facing)       │
        │  MalformedPackageError   61003  PARSE                        │
        │  VersionFormatError      61004  VALIDATION                   │
        │  ContextAllocationError  61005  NETWORK                      │
        │  IntegrationDispatchError 61006 INTEGRATION                  │
        │  TransactionError        61007  DATABASE                     │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> err = DuplicateNameError("orcA", project_id=10)
    >>> err.code
    61002
    >>> err.with_context(user="alice").context.user
    'alice'

Tags:
    error-handling, exception-hierarchy, error-codes, error-context,
    orcpublish

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"           # Context service, downstream transport
    DATABASE = "DATABASE"         # Catalog persistence
    STORAGE = "STORAGE"           # Blob store, scratch filesystem
    PARSE = "PARSE"               # Package layout, metadata
    VALIDATION = "VALIDATION"     # Version tokens, request shape
    CONFLICT = "CONFLICT"         # Name collisions
    INTEGRATION = "INTEGRATION"   # Downstream development operations
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are emitted by :meth:`to_dict`, so the same context
    object can be reused for every log line of an import.

    Attributes:
        user: User that issued the import
        project: Target project name
        project_id: Target project id
        resource_id: Blob store resource id of the package
        orchestrator: Orchestrator name (once parsed)
        stage: Last pipeline stage reached before the failure
        metadata: Additional key-value pairs
    """

    user: str | None = None
    project: str | None = None
    project_id: int | None = None
    resource_id: str | None = None
    orchestrator: str | None = None
    stage: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["user", "project", "project_id", "resource_id", "orchestrator", "stage"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class PublishError(Exception):
    """
    Base exception for every import pipeline error.

    Subclasses set ``default_code``, ``default_category`` and
    ``default_retryable``. Instances may override category and retry flag.

    Examples:
        >>> error = PublishError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["code"]
        61000
    """

    default_code: int = 61000
    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> PublishError:
        """
        Add context to this error (fluent API).

        Fields already set are kept; unknown keys go to ``metadata``.

        Usage:
            raise RetrievalError("Blob missing").with_context(resource_id="r1")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                if getattr(self.context, key) is None:
                    setattr(self.context, key, value)
            else:
                self.context.metadata.setdefault(key, value)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"


# =============================================================================
# PIPELINE ERRORS
# =============================================================================


class RetrievalError(PublishError):
    """Blob store unreachable, or the resource/version does not exist."""

    default_code = 61001
    default_category = ErrorCategory.STORAGE
    default_retryable = True


class DuplicateNameError(PublishError):
    """
    Another orchestrator with a different identity already owns the name.

    The only routine, user-facing error of the pipeline: its message is
    surfaced verbatim to the end user.
    """

    default_code = 61002
    default_category = ErrorCategory.CONFLICT
    default_retryable = False

    def __init__(
        self,
        name: str | None = None,
        *,
        project_id: int | None = None,
        message: str | None = None,
        **kwargs: Any,
    ):
        self.name = name
        self.project_id = project_id
        super().__init__(message or "The same orchestration name already exists", **kwargs)
        if name is not None:
            self.with_context(orchestrator=name)
        if project_id is not None:
            self.with_context(project_id=project_id)


class MalformedPackageError(PublishError):
    """Artifact contents are missing, corrupt, or laid out incorrectly."""

    default_code = 61003
    default_category = ErrorCategory.PARSE
    default_retryable = False


class VersionFormatError(PublishError):
    """A prior version token cannot be incremented."""

    default_code = 61004
    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(self, version: str, message: str | None = None, **kwargs: Any):
        self.version = version
        super().__init__(message or f"Cannot increment version token: {version!r}", **kwargs)


class ContextAllocationError(PublishError):
    """The context-id service failed to hand out an id."""

    default_code = 61005
    default_category = ErrorCategory.NETWORK
    default_retryable = True


class IntegrationDispatchError(PublishError):
    """A downstream development operation failed or returned garbage."""

    default_code = 61006
    default_category = ErrorCategory.INTEGRATION
    default_retryable = False


class TransactionError(PublishError):
    """Generic catalog persistence failure."""

    default_code = 61007
    default_category = ErrorCategory.DATABASE
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, PublishError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, PublishError):
        return error.category
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK
    if isinstance(error, OSError):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "PublishError",
    "RetrievalError",
    "DuplicateNameError",
    "MalformedPackageError",
    "VersionFormatError",
    "ContextAllocationError",
    "IntegrationDispatchError",
    "TransactionError",
    "is_retryable",
    "categorize_error",
]
