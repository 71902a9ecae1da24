# =============================================================================
# app/middleware/timeout.py - Global Request Timeout
# =============================================================================

import asyncio
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from app.exceptions import ERROR_MESSAGES, ErrorCode, build_error_envelope

logger = logging.getLogger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Abort requests that run longer than `timeout_seconds` with a 408."""

    def __init__(self, app: ASGIApp, timeout_seconds: float = 30.0):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"{request.method} {request.url.path} - timed out after {self.timeout_seconds}s"
            )
            return JSONResponse(
                status_code=status.HTTP_408_REQUEST_TIMEOUT,
                content=build_error_envelope(
                    request,
                    ErrorCode.REQUEST_TIMEOUT.value,
                    ERROR_MESSAGES[ErrorCode.REQUEST_TIMEOUT],
                ),
            )
