# =============================================================================
# tests/test_metrics.py - Prometheus Metrics Tests
# =============================================================================

import logging
from unittest.mock import patch

from prometheus_client import CONTENT_TYPE_LATEST

from lib.metrics import MetricsCollector, normalize_route
from lib.supabase_client import SupabaseClientError
from tests.conftest import USER_ID


def _value(collector: MetricsCollector, name: str, labels: dict) -> float | None:
    return collector.registry.get_sample_value(name, labels)


class TestNormalizeRoute:
    """Test route label normalization."""

    def test_uuid_segment(self):
        path = "/api/users/550e8400-e29b-41d4-a716-446655440000"
        assert normalize_route(path) == "/api/users/{uuid}"

    def test_numeric_segment(self):
        assert normalize_route("/api/items/42/history") == "/api/items/{id}/history"

    def test_query_string_dropped(self):
        assert normalize_route("/api/certificates?page=2") == "/api/certificates"

    def test_certificate_id_untouched(self):
        path = "/api/certificates/CERT-1A2B3C4D5E6F/verify"
        assert normalize_route(path) == path


class TestMetricsCollector:

    def test_collectors_are_isolated(self):
        first = MetricsCollector()
        second = MetricsCollector()

        first.record_certificate_issued("issuer-1")

        assert _value(first, "certificate_issued_total", {"issuer_id": "issuer-1"}) == 1.0
        assert _value(second, "certificate_issued_total", {"issuer_id": "issuer-1"}) is None

    def test_unknown_issuer_label(self):
        collector = MetricsCollector()

        collector.record_certificate_verified(None)

        assert _value(collector, "certificate_verified_total", {"issuer_id": "unknown"}) == 1.0

    def test_authentication_attempts(self):
        collector = MetricsCollector()

        collector.record_authentication_attempt(True)
        collector.record_authentication_attempt(False)
        collector.record_authentication_attempt(False)

        assert _value(collector, "authentication_attempts_total", {"status": "success"}) == 1.0
        assert _value(collector, "authentication_attempts_total", {"status": "failure"}) == 2.0

    def test_email_jobs(self):
        collector = MetricsCollector()

        collector.record_email_job("certificate-issued", success=False)

        labels = {"job_type": "certificate-issued", "status": "failed"}
        assert _value(collector, "email_jobs_total", labels) == 1.0

    def test_export(self):
        collector = MetricsCollector()
        collector.record_db_query("select", 0.02)

        body, content_type = collector.export()

        assert content_type == CONTENT_TYPE_LATEST
        assert b"db_query_duration_seconds_count" in body


class TestMetricsEndpoints:
    """Test the HTTP middleware and /api/metrics routes."""

    def test_request_counted(self, client, metrics):
        client.get("/api/health/live")

        labels = {"method": "GET", "route": "/api/health/live", "status": "200"}
        assert _value(metrics, "http_requests_total", labels) == 1.0
        assert _value(metrics, "http_request_duration_seconds_count", labels) == 1.0
        assert _value(metrics, "http_errors_total", labels) is None

    def test_error_counted_with_normalized_route(self, client, metrics):
        client.get("/api/users/550e8400-e29b-41d4-a716-446655440000")

        labels = {"method": "GET", "route": "/api/users/{uuid}", "status": "401"}
        assert _value(metrics, "http_errors_total", labels) == 1.0

    def test_metrics_endpoint(self, client):
        response = client.get("/api/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text

    def test_metrics_health(self, client):
        response = client.get("/api/metrics/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["message"] == "Metrics endpoint is healthy"


class TestServerErrors:
    """5xx responses still pass through the metrics and correlation middleware."""

    def test_database_error_recorded(self, client, metrics, user_headers, caplog):
        with patch("core.services.user_service.SupabaseClient") as mock_db:
            mock_db.fetch_record.side_effect = SupabaseClientError("connection refused", code="FETCH_FAILED")
            with caplog.at_level(logging.INFO):
                response = client.get(
                    f"/api/users/{USER_ID}",
                    headers={**user_headers, "X-Correlation-ID": "corr-db-down"},
                )

        assert response.status_code == 500
        body = response.json()
        assert body["errorCode"] == "DATABASE_ERROR"
        assert body["message"] == "Database error occurred"
        assert body["correlationId"] == "corr-db-down"
        assert "connection refused" not in response.text
        assert response.headers["X-Correlation-ID"] == "corr-db-down"
        assert response.headers["X-Request-ID"] == "corr-db-down"

        labels = {"method": "GET", "route": "/api/users/{uuid}", "status": "500"}
        assert _value(metrics, "http_requests_total", labels) == 1.0
        assert _value(metrics, "http_request_duration_seconds_count", labels) == 1.0
        assert _value(metrics, "http_errors_total", labels) == 1.0
        assert any("Request completed" in record.getMessage() and " 500 " in record.getMessage()
                   for record in caplog.records)

    def test_unexpected_error_recorded(self, client, metrics, user_headers):
        with patch("core.services.user_service.SupabaseClient") as mock_db:
            mock_db.fetch_record.side_effect = RuntimeError("boom")
            response = client.get(f"/api/users/{USER_ID}", headers=user_headers)

        assert response.status_code == 500
        assert response.json()["errorCode"] == "INTERNAL_SERVER_ERROR"
        assert response.headers["X-Correlation-ID"]

        labels = {"method": "GET", "route": "/api/users/{uuid}", "status": "500"}
        assert _value(metrics, "http_requests_total", labels) == 1.0
        assert _value(metrics, "http_errors_total", labels) == 1.0
