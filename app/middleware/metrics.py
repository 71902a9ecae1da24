# =============================================================================
# app/middleware/metrics.py - HTTP Metrics Middleware
# =============================================================================

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.exceptions import unhandled_exception_handler
from lib.metrics import get_metrics_collector, normalize_route


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Record latency and count for every request.

    Responses with status >= 400 also increment http_errors_total. Routes
    are normalized so IDs don't explode label cardinality.

    Exceptions that no class-specific handler caught are turned into the
    500 envelope here. Starlette would otherwise answer them from
    ServerErrorMiddleware, outside this middleware and the correlation
    middleware, and the request would go unrecorded.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            response = await unhandled_exception_handler(request, e)
        duration = time.perf_counter() - start

        collector = get_metrics_collector()
        route = normalize_route(request.url.path)
        collector.record_http_request(request.method, route, response.status_code, duration)
        if response.status_code >= 400:
            collector.record_http_error(request.method, route, response.status_code)

        return response
