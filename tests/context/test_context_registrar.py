"""Tests for context-id allocation."""

from unittest.mock import MagicMock

import httpx
import pytest

from orcpublish.context.registrar import ContextRegistrar, HttpContextService, LocalContextService
from orcpublish.core.errors import ContextAllocationError


class TestLocalContextService:
    def test_sequential_ids(self):
        service = LocalContextService()
        first = service.create_context_id("ws", "proj1", "orcA", "v1", "alice")
        second = service.create_context_id("ws", "proj1", "orcA", "v2", "alice")
        assert (first, second) == ("ctx-1", "ctx-2")
        assert service.issued["ctx-2"] == ("ws", "proj1", "orcA", "v2", "alice")


class TestHttpContextService:
    def test_reads_context_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/contexts"
            return httpx.Response(200, json={"data": {"contextId": "remote-7"}})

        client = httpx.Client(base_url="http://ctx", transport=httpx.MockTransport(handler))
        service = HttpContextService("http://ctx", client=client)
        assert service.create_context_id("ws", "proj1", "orcA", "v1", "alice") == "remote-7"


class TestContextRegistrar:
    def test_register(self):
        registrar = ContextRegistrar(LocalContextService())
        assert registrar.register("ws", "proj1", "orcA", "v1", "alice") == "ctx-1"

    def test_service_failure_is_wrapped(self):
        service = MagicMock()
        service.create_context_id.side_effect = ConnectionError("down")
        with pytest.raises(ContextAllocationError) as excinfo:
            ContextRegistrar(service).register("ws", "proj1", "orcA", "v1", "alice")
        assert excinfo.value.code == 61005
        assert excinfo.value.context.orchestrator == "orcA"
        assert isinstance(excinfo.value.__cause__, ConnectionError)

    def test_empty_id_is_rejected(self):
        service = MagicMock()
        service.create_context_id.return_value = ""
        with pytest.raises(ContextAllocationError):
            ContextRegistrar(service).register("ws", "proj1", "orcA", "v1", "alice")
