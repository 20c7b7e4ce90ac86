"""Tests for the HTTP development-operation provider."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from orcpublish.catalog.models import OrchestratorInfo
from orcpublish.core.errors import IntegrationDispatchError
from orcpublish.core.workspace import Workspace
from orcpublish.integration.http import HttpImportProvider
from orcpublish.integration.protocol import ImportRequestRef, OrchestratorHandle


def _request() -> ImportRequestRef:
    return ImportRequestRef(
        user_name="alice",
        workspace=Workspace(id=1, name="ws"),
        labels=frozenset({"dev"}),
        orchestrator=OrchestratorInfo(uuid="u1", name="orcA", id=3),
        handle=OrchestratorHandle(None, "ws", frozenset({"dev"}), "alice", datetime.now(UTC)),
        context_id="ctx-1",
        new_version="v1",
    )


def _provider(handler) -> HttpImportProvider:
    client = httpx.Client(base_url="http://wf", transport=httpx.MockTransport(handler))
    return HttpImportProvider("http://wf", client=client)


class TestHttpImportProvider:
    def test_posts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(
                200, json={"data": {"orchestrationId": 500, "orchestrationContent": '{"k": 1}'}}
            )

        response = _provider(handler).import_ref(_request())
        assert response.app_id == 500
        assert response.content == '{"k": 1}'
        assert seen["contextId"] == "ctx-1"
        assert seen["orchestrator"]["uuid"] == "u1"
        assert seen["labels"] == ["dev"]

    def test_http_error(self):
        with pytest.raises(IntegrationDispatchError) as excinfo:
            _provider(lambda r: httpx.Response(500)).import_ref(_request())
        assert "500" in excinfo.value.message

    def test_non_json(self):
        with pytest.raises(IntegrationDispatchError):
            _provider(lambda r: httpx.Response(200, content=b"<html>")).import_ref(_request())
