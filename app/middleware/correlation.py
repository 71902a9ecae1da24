# =============================================================================
# app/middleware/correlation.py - Correlation ID & Request Logging
# =============================================================================
# Reads X-Correlation-ID from the request (or generates one), binds it to
# the logging context and echoes it back as X-Correlation-ID and
# X-Request-ID.
# =============================================================================

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from lib.log_context import generate_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation ID and log its outcome."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        start = time.perf_counter()
        logger.info(f"Incoming request: {request.method} {request.url.path}")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"{response.status_code} {duration_ms:.1f}ms"
        )

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[REQUEST_ID_HEADER] = correlation_id
        return response
