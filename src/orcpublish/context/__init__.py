"""Context-id allocation."""

from orcpublish.context.registrar import (
    ContextRegistrar,
    ContextService,
    HttpContextService,
    LocalContextService,
)

__all__ = ["ContextRegistrar", "ContextService", "HttpContextService", "LocalContextService"]
