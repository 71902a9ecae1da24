# =============================================================================
# lib/metrics.py - Prometheus Metrics Collection
# =============================================================================
# Central collector for HTTP, database and domain metrics. Uses a dedicated
# CollectorRegistry so tests can create isolated collectors.
#
# Usage:
#   from lib.metrics import get_metrics_collector
#   get_metrics_collector().record_certificate_issued(issuer_id)
# =============================================================================

import logging
import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

_UUID_SEGMENT = re.compile(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")
_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def normalize_route(path: str) -> str:
    """
    Collapse IDs in a path to keep label cardinality low.

    Example:
        /api/users/550e8400-e29b-41d4-a716-446655440000?x=1 -> /api/users/{uuid}
        /api/items/42/history -> /api/items/{id}/history
    """
    normalized = path.split("?")[0]
    normalized = _UUID_SEGMENT.sub("/{uuid}", normalized)
    normalized = _NUMERIC_SEGMENT.sub("/{id}", normalized)
    return normalized


class MetricsCollector:
    """Central metrics collector for the certificate API."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()

        # HTTP metrics
        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "route", "status"],
            registry=self.registry,
        )

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "route", "status"],
            registry=self.registry,
        )

        self.http_errors_total = Counter(
            "http_errors_total",
            "Total number of HTTP errors",
            ["method", "route", "status"],
            registry=self.registry,
        )

        # Database metrics
        self.db_query_duration = Histogram(
            "db_query_duration_seconds",
            "Database query latency in seconds",
            ["query_type"],
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
            registry=self.registry,
        )

        self.db_connection_status = Counter(
            "db_connection_status",
            "Database connection checks by outcome",
            ["status"],
            registry=self.registry,
        )

        # Application metrics
        self.certificate_issued = Counter(
            "certificate_issued_total",
            "Total number of issued certificates",
            ["issuer_id"],
            registry=self.registry,
        )

        self.certificate_verified = Counter(
            "certificate_verified_total",
            "Total number of verified certificates",
            ["issuer_id"],
            registry=self.registry,
        )

        self.authentication_attempts = Counter(
            "authentication_attempts_total",
            "Total authentication attempts",
            ["status"],
            registry=self.registry,
        )

        self.email_jobs = Counter(
            "email_jobs_total",
            "Email jobs processed by workers",
            ["job_type", "status"],
            registry=self.registry,
        )

        logger.info("Metrics collector initialized")

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def record_http_request(self, method: str, route: str, status: int, duration: float) -> None:
        """Record duration and count of a completed request."""
        self.http_request_duration.labels(method, route, str(status)).observe(duration)
        self.http_requests_total.labels(method, route, str(status)).inc()

    def record_http_error(self, method: str, route: str, status: int) -> None:
        self.http_errors_total.labels(method, route, str(status)).inc()

    def record_db_query(self, query_type: str, duration: float) -> None:
        self.db_query_duration.labels(query_type).observe(duration)

    def record_db_connection_status(self, connected: bool) -> None:
        self.db_connection_status.labels("connected" if connected else "disconnected").inc()

    def record_certificate_issued(self, issuer_id: str | None) -> None:
        self.certificate_issued.labels(issuer_id or "unknown").inc()

    def record_certificate_verified(self, issuer_id: str | None) -> None:
        self.certificate_verified.labels(issuer_id or "unknown").inc()

    def record_authentication_attempt(self, success: bool) -> None:
        self.authentication_attempts.labels("success" if success else "failure").inc()

    def record_email_job(self, job_type: str, success: bool) -> None:
        self.email_jobs.labels(job_type, "completed" if success else "failed").inc()

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export(self) -> tuple[bytes, str]:
        """Metrics in Prometheus text format plus the matching content type."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector, created on first use."""
    global _collector
    if _collector is None:
        _collector = MetricsCollector()
    return _collector
