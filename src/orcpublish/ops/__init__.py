"""
Operations layer: typed, transport-agnostic functions for API and CLI.

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` and never raise pipeline errors
- All functions honour ``dry_run``

Usage::

    from orcpublish.ops import OperationContext
    from orcpublish.ops.imports import import_orchestrator

    ctx = OperationContext(coordinator=build_coordinator(settings))
    result = import_orchestrator(ctx, request)
"""

from orcpublish.ops.context import OperationContext
from orcpublish.ops.result import OperationError, OperationResult

__all__ = ["OperationContext", "OperationError", "OperationResult"]
