"""Context registrar — obtain a correlation id for one published version.

The context-id service is an external collaborator reached through the
:class:`ContextService` protocol. :class:`ContextRegistrar` turns every way
that call can fail (transport error, error status, empty id) into
:class:`ContextAllocationError`.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any, Protocol, runtime_checkable

import httpx

from orcpublish.core.errors import ContextAllocationError
from orcpublish.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ContextService(Protocol):
    def create_context_id(
        self,
        workspace_name: str,
        project_name: str,
        orchestrator_name: str,
        version: str,
        user_name: str,
    ) -> str:
        ...


class LocalContextService:
    """In-process service handing out ``ctx-1``, ``ctx-2``, …"""

    def __init__(self, prefix: str = "ctx") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self.issued: dict[str, tuple[str, str, str, str, str]] = {}

    def create_context_id(
        self,
        workspace_name: str,
        project_name: str,
        orchestrator_name: str,
        version: str,
        user_name: str,
    ) -> str:
        with self._lock:
            context_id = f"{self.prefix}-{next(self._counter)}"
            self.issued[context_id] = (workspace_name, project_name, orchestrator_name, version, user_name)
        return context_id


class HttpContextService:
    """Remote context-id service: ``POST /contexts`` → ``{"data": {"contextId": …}}``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def create_context_id(
        self,
        workspace_name: str,
        project_name: str,
        orchestrator_name: str,
        version: str,
        user_name: str,
    ) -> str:
        body = {
            "workspaceName": workspace_name,
            "projectName": project_name,
            "orchestratorName": orchestrator_name,
            "version": version,
            "userName": user_name,
        }
        resp = self._client.post("/contexts", json=body)
        resp.raise_for_status()
        payload: dict[str, Any] = resp.json()
        data = payload.get("data", payload)
        return str(data.get("contextId") or "")


class ContextRegistrar:
    """Allocate context ids, normalising failures."""

    def __init__(self, service: ContextService) -> None:
        self.service = service

    def register(
        self,
        workspace_name: str,
        project_name: str,
        orchestrator_name: str,
        version: str,
        user_name: str,
    ) -> str:
        try:
            context_id = self.service.create_context_id(
                workspace_name, project_name, orchestrator_name, version, user_name
            )
        except ContextAllocationError:
            raise
        except Exception as exc:
            raise ContextAllocationError(
                f"Context service failed for {orchestrator_name} {version}: {exc}", cause=exc
            ).with_context(user=user_name, project=project_name, orchestrator=orchestrator_name) from exc

        if not context_id:
            raise ContextAllocationError(
                f"Context service returned no id for {orchestrator_name} {version}"
            ).with_context(user=user_name, project=project_name, orchestrator=orchestrator_name)

        logger.info("context_id_created", context_id=context_id, orchestrator=orchestrator_name, version=version)
        return context_id
