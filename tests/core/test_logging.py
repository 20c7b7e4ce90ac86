"""Tests for orcpublish.core.logging."""

import structlog

from orcpublish.core.logging import LogContext, bind_context, clear_context, get_logger


class TestLogContext:
    def test_binds_and_restores(self):
        clear_context()
        with LogContext(user="alice", project="proj1", resource_id=None):
            bound = structlog.contextvars.get_contextvars()
            assert bound["user"] == "alice"
            assert bound["project"] == "proj1"
            assert "resource_id" not in bound
        assert "user" not in structlog.contextvars.get_contextvars()

    def test_bind_context(self):
        clear_context()
        bind_context(request_id="r-1")
        assert structlog.contextvars.get_contextvars()["request_id"] == "r-1"
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestGetLogger:
    def test_returns_structlog_logger(self):
        logger = get_logger("orcpublish.test")
        assert hasattr(logger, "info")
