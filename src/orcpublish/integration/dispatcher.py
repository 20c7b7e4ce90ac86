"""Integration dispatcher — run the ``import`` capability against a downstream system.

:meth:`IntegrationDispatcher.dispatch` resolves the provider for the
request's standard and labels, builds an :class:`ImportRequestRef`, lets the
caller shape it through three setters (context id, target project, resource
+ new version) and invokes ``import_ref``. Whatever goes wrong downstream
reaches the caller as :class:`IntegrationDispatchError`; the enclosing
catalog transaction is expected to roll back. Downstream systems own their
idempotence on retry.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from orcpublish.catalog.models import OrchestratorInfo
from orcpublish.core.errors import IntegrationDispatchError
from orcpublish.core.labels import normalize_labels
from orcpublish.core.logging import get_logger
from orcpublish.core.workspace import Workspace
from orcpublish.integration.protocol import (
    IMPORT_STANDARD,
    ImportRequestRef,
    OrchestratorHandle,
    RefJobContentResponse,
)
from orcpublish.integration.registry import IntegrationRegistry

logger = get_logger(__name__)

RequestSetter = Callable[[ImportRequestRef], None]


class IntegrationDispatcher:
    def __init__(self, registry: IntegrationRegistry) -> None:
        self.registry = registry

    def dispatch(
        self,
        info: OrchestratorInfo,
        handle: OrchestratorHandle,
        user_name: str,
        workspace: Workspace,
        labels: Iterable[str] | None,
        *,
        context_setter: RequestSetter,
        project_setter: RequestSetter,
        resource_setter: RequestSetter,
        standard: str = IMPORT_STANDARD,
    ) -> RefJobContentResponse:
        """Import the orchestrator's flow into the downstream system."""
        provider = self.registry.resolve(standard, labels)

        request = ImportRequestRef(
            user_name=user_name,
            workspace=workspace,
            labels=normalize_labels(labels),
            orchestrator=info,
            handle=handle,
        )
        context_setter(request)
        project_setter(request)
        resource_setter(request)

        logger.info(
            "dispatch_started",
            standard=standard,
            provider=type(provider).__name__,
            orchestrator=info.name,
            version=request.new_version,
        )
        try:
            response = provider.import_ref(request)
        except IntegrationDispatchError:
            raise
        except Exception as exc:
            raise IntegrationDispatchError(
                f"Downstream {standard} failed for {info.name}: {exc}", cause=exc
            ).with_context(user=user_name, orchestrator=info.name) from exc

        if not isinstance(response, RefJobContentResponse):
            raise IntegrationDispatchError(
                f"Downstream {standard} returned {type(response).__name__}, expected RefJobContentResponse"
            ).with_context(user=user_name, orchestrator=info.name)

        logger.info("dispatch_completed", orchestrator=info.name, app_id=response.app_id)
        return response
