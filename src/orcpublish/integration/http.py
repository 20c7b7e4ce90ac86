"""HTTP development-operation provider.

Posts the :class:`ImportRequestRef` payload to ``<base_url>/import`` and
reads ``{"data": {"orchestrationId": …, "orchestrationContent": …}}`` (the
``data`` envelope is optional).
"""

from __future__ import annotations

from typing import Any

import httpx

from orcpublish.core.errors import IntegrationDispatchError
from orcpublish.integration.protocol import ImportRequestRef, RefJobContentResponse


class HttpImportProvider:
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

    def import_ref(self, request: ImportRequestRef) -> RefJobContentResponse:
        try:
            resp = self._client.post("/import", json=request.to_payload())
            resp.raise_for_status()
            payload: dict[str, Any] = resp.json()
        except httpx.HTTPStatusError as exc:
            raise IntegrationDispatchError(
                f"Downstream import returned HTTP {exc.response.status_code}", cause=exc
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise IntegrationDispatchError(f"Downstream import failed: {exc}", cause=exc) from exc

        data = payload.get("data", payload)
        if not isinstance(data, dict):
            raise IntegrationDispatchError("Downstream import response is not an object")
        return RefJobContentResponse.from_job_content(data)
