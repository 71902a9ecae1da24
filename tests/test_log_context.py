# =============================================================================
# tests/test_log_context.py - Logging & Correlation ID Tests
# =============================================================================

import logging

from lib.log_context import (
    CorrelationIdFilter,
    get_correlation_id,
    reset_correlation_id,
    sanitize_body,
    set_correlation_id,
)


class TestSanitizeBody:
    """Test masking of sensitive request fields."""

    def test_masks_sensitive_fields(self):
        body = {"email": "ada@example.com", "password": "Str0ng!pass", "token": "abc", "apiKey": "k"}

        assert sanitize_body(body) == {
            "email": "ada@example.com",
            "password": "***",
            "token": "***",
            "apiKey": "***",
        }

    def test_leaves_original_untouched(self):
        body = {"secret": "s"}

        sanitize_body(body)

        assert body == {"secret": "s"}

    def test_non_dict_passthrough(self):
        assert sanitize_body(None) is None
        assert sanitize_body(["password"]) == ["password"]


class TestCorrelationContext:

    def test_set_and_reset(self):
        token = set_correlation_id("corr-1")
        try:
            assert get_correlation_id() == "corr-1"
        finally:
            reset_correlation_id(token)

    def test_filter_injects_id(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        token = set_correlation_id("corr-2")
        try:
            assert CorrelationIdFilter().filter(record) is True
        finally:
            reset_correlation_id(token)

        assert record.correlation_id == "corr-2"

    def test_filter_placeholder_without_id(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        token = set_correlation_id(None)
        try:
            CorrelationIdFilter().filter(record)
        finally:
            reset_correlation_id(token)

        assert record.correlation_id == "-"


class TestCorrelationMiddleware:
    """Test correlation headers on API responses."""

    def test_echoes_incoming_id(self, client):
        response = client.get("/api/health/live", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_generates_id(self, client):
        response = client.get("/api/health/live")

        generated = response.headers["X-Correlation-ID"]
        assert len(generated) == 36
        assert response.headers["X-Request-ID"] == generated
