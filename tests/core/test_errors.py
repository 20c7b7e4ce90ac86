"""Tests for orcpublish.core.errors."""

import pytest

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
    categorize_error,
    is_retryable,
)


class TestErrorCodes:
    """Every pipeline error carries a stable numeric code."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (RetrievalError("x"), 61001),
            (DuplicateNameError("orcA"), 61002),
            (MalformedPackageError("x"), 61003),
            (VersionFormatError("abc"), 61004),
            (ContextAllocationError("x"), 61005),
            (IntegrationDispatchError("x"), 61006),
            (TransactionError("x"), 61007),
        ],
    )
    def test_codes(self, error, code):
        assert error.code == code
        assert isinstance(error, PublishError)

    def test_base_defaults(self):
        error = PublishError("boom")
        assert error.code == 61000
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False

    def test_code_override(self):
        assert PublishError("boom", code=1).code == 1


class TestDuplicateNameError:
    """The user-facing conflict error."""

    def test_default_message(self):
        error = DuplicateNameError("orcA", project_id=10)
        assert str(error) == "The same orchestration name already exists"
        assert error.context.orchestrator == "orcA"
        assert error.context.project_id == 10
        assert error.category == ErrorCategory.CONFLICT

    def test_custom_message(self):
        assert DuplicateNameError(message="taken").message == "taken"


class TestWithContext:
    """Fluent context enrichment."""

    def test_fills_empty_fields(self):
        error = RetrievalError("missing").with_context(user="alice", resource_id="r1")
        assert error.context.user == "alice"
        assert error.context.resource_id == "r1"

    def test_keeps_existing_fields(self):
        error = RetrievalError("missing").with_context(stage="FETCHED")
        error.with_context(stage="PARSED")
        assert error.context.stage == "FETCHED"

    def test_unknown_keys_go_to_metadata(self):
        error = PublishError("x").with_context(attempt=2)
        assert error.context.metadata == {"attempt": 2}

    def test_to_dict(self):
        cause = ValueError("bad")
        error = MalformedPackageError("broken", cause=cause).with_context(user="alice")
        d = error.to_dict()
        assert d["error_type"] == "MalformedPackageError"
        assert d["code"] == 61003
        assert d["category"] == "PARSE"
        assert d["context"] == {"user": "alice"}
        assert d["cause"] == "bad"
        assert error.__cause__ is cause


class TestErrorContext:
    def test_to_dict_skips_none(self):
        ctx = ErrorContext(user="alice", metadata={"k": "v"})
        assert ctx.to_dict() == {"user": "alice", "k": "v"}


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(RetrievalError("x")) is True
        assert is_retryable(DuplicateNameError()) is False
        assert is_retryable(ConnectionError()) is True
        assert is_retryable(KeyError()) is False

    def test_retryable_override(self):
        assert RetrievalError("x", retryable=False).retryable is False

    def test_categorize(self):
        assert categorize_error(TransactionError("x")) == ErrorCategory.DATABASE
        assert categorize_error(TimeoutError()) == ErrorCategory.NETWORK
        assert categorize_error(FileNotFoundError()) == ErrorCategory.STORAGE
        assert categorize_error(ValueError()) == ErrorCategory.VALIDATION
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN
