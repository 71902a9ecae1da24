# =============================================================================
# app/middleware/ - HTTP Middleware
# =============================================================================
# - correlation.py: Correlation IDs and request logging
# - metrics.py: Prometheus request metrics
# - timeout.py: Global per-request timeout
#
# Registered in main.py. Starlette runs the last added middleware first,
# so they are added in reverse order of execution.
# =============================================================================

from app.middleware.correlation import CorrelationIdMiddleware
from app.middleware.metrics import MetricsMiddleware
from app.middleware.timeout import TimeoutMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "MetricsMiddleware",
    "TimeoutMiddleware",
]
