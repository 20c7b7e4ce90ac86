"""Core primitives shared by every orcpublish layer.

Modules
-------
errors      PublishError hierarchy with stable numeric codes
logging     structlog configuration, LogContext
settings    PublishSettings (pydantic-settings, ``ORCPUB_`` prefix)
labels      Environment label classification
versioning  Version token allocation

Tags:
    orcpublish, core, package-overview

Doc-Types:
    package-overview, module-index
"""

from orcpublish.core.errors import (
    ContextAllocationError,
    DuplicateNameError,
    ErrorCategory,
    ErrorContext,
    IntegrationDispatchError,
    MalformedPackageError,
    PublishError,
    RetrievalError,
    TransactionError,
    VersionFormatError,
)

__all__ = [
    "ContextAllocationError",
    "DuplicateNameError",
    "ErrorCategory",
    "ErrorContext",
    "IntegrationDispatchError",
    "MalformedPackageError",
    "PublishError",
    "RetrievalError",
    "TransactionError",
    "VersionFormatError",
]
