# =============================================================================
# app/exceptions.py - Application Exceptions & Global Handlers
# =============================================================================
# Centralized error taxonomy for the API. Every error leaves the service in
# the same JSON envelope:
#
#   {
#     "errorCode": "CERTIFICATE_NOT_FOUND",
#     "message": "Certificate not found",
#     "details": {...},            # optional
#     "timestamp": "2024-01-15T10:30:00+00:00",
#     "path": "/api/certificates/...",
#     "method": "GET",
#     "correlationId": "3f2a..."
#   }
#
# 5xx errors are logged at ERROR and forwarded to Sentry; 4xx at WARNING.
# =============================================================================

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lib import sentry
from lib.log_context import get_correlation_id, sanitize_body
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in `errorCode`."""

    # Authentication errors
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Blockchain/Stellar errors
    STELLAR_ERROR = "STELLAR_ERROR"
    INVALID_STELLAR_ADDRESS = "INVALID_STELLAR_ADDRESS"
    BLOCKCHAIN_CONNECTION_ERROR = "BLOCKCHAIN_CONNECTION_ERROR"
    INVALID_TRANSACTION = "INVALID_TRANSACTION"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"

    # Certificate errors
    CERTIFICATE_NOT_FOUND = "CERTIFICATE_NOT_FOUND"
    CERTIFICATE_INVALID = "CERTIFICATE_INVALID"
    CERTIFICATE_EXPIRED = "CERTIFICATE_EXPIRED"
    CERTIFICATE_REVOKED = "CERTIFICATE_REVOKED"
    CERTIFICATE_ALREADY_EXISTS = "CERTIFICATE_ALREADY_EXISTS"
    INVALID_CERTIFICATE_DATA = "INVALID_CERTIFICATE_DATA"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
    RESOURCE_IN_USE = "RESOURCE_IN_USE"

    # Server errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    DATABASE_ERROR = "DATABASE_ERROR"

    # General errors
    CONFLICT = "CONFLICT"
    FORBIDDEN = "FORBIDDEN"
    BAD_REQUEST = "BAD_REQUEST"
    REQUEST_TIMEOUT = "REQUEST_TIMEOUT"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNAUTHORIZED: "Unauthorized access",
    ErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    ErrorCode.TOKEN_EXPIRED: "Token has expired",
    ErrorCode.TOKEN_INVALID: "Invalid token",
    ErrorCode.INSUFFICIENT_PERMISSIONS: "Insufficient permissions to perform this action",

    ErrorCode.VALIDATION_ERROR: "Validation error",
    ErrorCode.INVALID_INPUT: "Invalid input provided",
    ErrorCode.MISSING_REQUIRED_FIELD: "Missing required field",

    ErrorCode.STELLAR_ERROR: "Stellar blockchain error",
    ErrorCode.INVALID_STELLAR_ADDRESS: "Invalid Stellar address",
    ErrorCode.BLOCKCHAIN_CONNECTION_ERROR: "Failed to connect to blockchain",
    ErrorCode.INVALID_TRANSACTION: "Invalid transaction",
    ErrorCode.TRANSACTION_FAILED: "Transaction failed",

    ErrorCode.CERTIFICATE_NOT_FOUND: "Certificate not found",
    ErrorCode.CERTIFICATE_INVALID: "Certificate is invalid",
    ErrorCode.CERTIFICATE_EXPIRED: "Certificate has expired",
    ErrorCode.CERTIFICATE_REVOKED: "Certificate has been revoked",
    ErrorCode.CERTIFICATE_ALREADY_EXISTS: "Certificate already exists",
    ErrorCode.INVALID_CERTIFICATE_DATA: "Invalid certificate data",

    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.DUPLICATE_RESOURCE: "Resource already exists",
    ErrorCode.RESOURCE_IN_USE: "Resource is in use",

    ErrorCode.INTERNAL_SERVER_ERROR: "Internal server error",
    ErrorCode.SERVICE_UNAVAILABLE: "Service unavailable",
    ErrorCode.DATABASE_ERROR: "Database error occurred",

    ErrorCode.CONFLICT: "Conflict occurred",
    ErrorCode.FORBIDDEN: "Forbidden",
    ErrorCode.BAD_REQUEST: "Bad request",
    ErrorCode.REQUEST_TIMEOUT: "Request timeout",
}


# =============================================================================
# Exception Hierarchy
# =============================================================================

class AppException(Exception):
    """
    Base exception for the certificate API.

    All custom exceptions inherit from this class. The message defaults to
    the standard text for the error code.
    """

    def __init__(
        self,
        error_code: ErrorCode,
        status_code: int,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.error_code = error_code
        self.status_code = status_code
        self.message = message or ERROR_MESSAGES[error_code]
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the body of an error envelope."""
        result: dict[str, Any] = {
            "errorCode": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationException(AppException):
    """Raised when input fails business-level validation."""

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(ErrorCode.VALIDATION_ERROR, status.HTTP_400_BAD_REQUEST, message, details)


class StellarException(AppException):
    """Raised for Stellar network or address problems."""

    def __init__(
        self,
        error_code: ErrorCode = ErrorCode.STELLAR_ERROR,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        if error_code in (ErrorCode.INVALID_STELLAR_ADDRESS, ErrorCode.INVALID_TRANSACTION):
            status_code = status.HTTP_400_BAD_REQUEST
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
        super().__init__(error_code, status_code, message, details)


class CertificateException(AppException):
    """Raised for certificate lookups and lifecycle violations."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        if error_code == ErrorCode.CERTIFICATE_NOT_FOUND:
            status_code = status.HTTP_404_NOT_FOUND
        elif error_code in (ErrorCode.CERTIFICATE_ALREADY_EXISTS, ErrorCode.CONFLICT):
            status_code = status.HTTP_409_CONFLICT
        else:
            status_code = status.HTTP_400_BAD_REQUEST
        super().__init__(error_code, status_code, message, details)


class AuthException(AppException):
    """Raised when authentication fails or the caller lacks a role."""

    def __init__(
        self,
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        if error_code == ErrorCode.INSUFFICIENT_PERMISSIONS:
            status_code = status.HTTP_403_FORBIDDEN
        else:
            status_code = status.HTTP_401_UNAUTHORIZED
        super().__init__(error_code, status_code, message, details)


class NotFoundException(AppException):
    """Raised when a user, issuer or other record doesn't exist."""

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(ErrorCode.NOT_FOUND, status.HTTP_404_NOT_FOUND, message, details)


class ConflictException(AppException):
    """Raised when a unique field is already taken."""

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(ErrorCode.CONFLICT, status.HTTP_409_CONFLICT, message, details)


class InternalServerErrorException(AppException):
    """Raised when a dependency fails in a way the caller can't fix."""

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            ErrorCode.INTERNAL_SERVER_ERROR,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            message,
            details,
        )


# =============================================================================
# Envelope Helpers
# =============================================================================

def build_error_envelope(
    request: Request,
    error_code: str,
    message: Any,
    details: Any = None,
) -> dict[str, Any]:
    """Build the uniform error body for a request."""
    envelope: dict[str, Any] = {
        "errorCode": error_code,
        "message": message,
    }
    if details:
        envelope["details"] = details
    envelope["timestamp"] = datetime.now(timezone.utc).isoformat()
    envelope["path"] = request.url.path
    envelope["method"] = request.method

    correlation_id = get_correlation_id()
    if correlation_id:
        envelope["correlationId"] = correlation_id
    return envelope


def _report(request: Request, status_code: int, exc: BaseException) -> None:
    """Log an error and forward it to Sentry when it is a server error."""
    log_message = f"{request.method} {request.url.path} - {status_code}"
    if status_code >= 500:
        logger.error(f"{log_message}: {exc!r}", exc_info=exc)
        sentry.capture_exception(exc, {
            "url": request.url.path,
            "method": request.method,
            "statusCode": status_code,
            "correlationId": get_correlation_id(),
        })
    else:
        logger.warning(f"{log_message}: {exc}")


def format_validation_errors(errors: list[dict[str, Any]]) -> dict[str, str]:
    """
    Turn pydantic error entries into {"body.field": "msg, msg"}.

    Multiple constraints on the same field are joined with ", ".
    """
    formatted: dict[str, list[str]] = {}
    for error in errors:
        field = ".".join(str(part) for part in error.get("loc", ())) or "request"
        formatted.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return {field: ", ".join(messages) for field, messages in formatted.items()}


# =============================================================================
# Exception Handlers
# =============================================================================

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException to the JSON error envelope."""
    _report(request, exc.status_code, exc)
    body = exc.to_dict()
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_envelope(request, body["errorCode"], body["message"], body.get("details")),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle request validation errors.

    Returns 400 with per-field constraint messages.
    """
    details = format_validation_errors(exc.errors())
    logger.warning(
        f"{request.method} {request.url.path} - 400 validation failed: {details} "
        f"body={sanitize_body(exc.body)}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=build_error_envelope(
            request,
            ErrorCode.VALIDATION_ERROR.value,
            "Validation failed",
            details,
        ),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle framework HTTP errors (404 on unknown routes, 405, ...)."""
    _report(request, exc.status_code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_envelope(request, "HTTP_ERROR", exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    _report(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error_envelope(
            request,
            ErrorCode.INTERNAL_SERVER_ERROR.value,
            ERROR_MESSAGES[ErrorCode.INTERNAL_SERVER_ERROR],
        ),
    )


async def database_exception_handler(request: Request, exc: SupabaseClientError) -> JSONResponse:
    """
    Handle database failures that escape the service layer.

    The envelope carries the generic message only; the Supabase error code
    and suggestion go to the logs and Sentry.
    """
    _report(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=build_error_envelope(
            request,
            ErrorCode.DATABASE_ERROR.value,
            ERROR_MESSAGES[ErrorCode.DATABASE_ERROR],
        ),
    )
