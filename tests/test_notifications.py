"""Tests for notifications, logging and the error taxonomy mapping."""

import logging

import pytest

from backoffice.core.errors import (
    ConflictError,
    ErrorCode,
    NetworkError,
    NotFoundError,
    ResponseError,
    ValidationError,
    error_code_for,
    to_app_exception,
)
from backoffice.core.logging import LoggerAdapter, get_logger, setup_logging
from backoffice.services.notifications import Notifier, Severity


class TestErrorMapping:
    """Tests for exception to error code and status mapping."""

    @pytest.mark.parametrize(
        "exc,code,status_code",
        [
            (NetworkError("down"), ErrorCode.NETWORK_ERROR, 503),
            (ResponseError("boom", 500), ErrorCode.BACKEND_ERROR, 502),
            (NotFoundError("gone"), ErrorCode.NOT_FOUND, 404),
            (ConflictError("in use"), ErrorCode.CONFLICT, 409),
            (ValidationError("name is required", field="name"), ErrorCode.MISSING_REQUIRED_FIELD, 422),
            (ValidationError("bad reading", field="current_reading"), ErrorCode.VALIDATION_ERROR, 422),
        ],
    )
    def test_mapping(self, exc, code, status_code):
        assert error_code_for(exc) == code

        app_exc = to_app_exception(exc)

        assert app_exc.status_code == status_code
        assert app_exc.detail["error_code"] == code.value
        assert app_exc.detail["message"] == str(exc)
        assert app_exc.detail["suggested_action"]

    def test_unknown_exception_is_internal(self):
        assert error_code_for(RuntimeError("x")) == ErrorCode.INTERNAL_ERROR


class TestNotifier:
    """Tests for the transient notification queue."""

    def test_error_carries_cause_and_suggestion(self):
        notifier = Notifier()

        notification = notifier.error("Failed to delete customer", ConflictError("in use"))

        assert notification.severity == Severity.ERROR
        assert notification.message == "Failed to delete customer: in use"
        assert "cannot be changed or deleted" in notification.suggested_action

    def test_queue_is_bounded(self):
        notifier = Notifier(limit=2)
        for index in range(5):
            notifier.info(f"message {index}")

        assert [n.message for n in notifier.pending()] == ["message 3", "message 4"]
        assert notifier.pending() == []
        assert notifier.latest is None

    def test_success(self):
        notifier = Notifier()

        notifier.success("Item created successfully")

        assert notifier.latest.severity == Severity.SUCCESS
        assert notifier.latest.suggested_action is None


class TestLogging:
    """Tests for logger naming and setup."""

    def test_loggers_share_app_namespace(self):
        assert get_logger("reports").name == "backoffice.reports"
        assert get_logger("backoffice.services.documents").name == "backoffice.services.documents"

    def test_adapter_appends_context(self):
        adapter = LoggerAdapter(get_logger(__name__), {"form": "sale"})

        assert adapter.process("Submitted with 2 lines", {}) == (
            "Submitted with 2 lines - form=sale", {}
        )

    def test_setup_quiets_http_libraries(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        try:
            setup_logging()

            assert len(root.handlers) == 1
            assert logging.getLogger("httpx").level == logging.WARNING
            assert logging.getLogger("reportlab").level == logging.WARNING
        finally:
            root.handlers = handlers
            root.setLevel(level)
