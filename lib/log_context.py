# =============================================================================
# lib/log_context.py - Logging Setup & Correlation IDs
# =============================================================================
# Every log line carries the correlation ID of the request (or Celery task)
# that produced it. The ID lives in a ContextVar so it follows the request
# across awaits without being passed around explicitly.
#
# Usage:
#   from lib.log_context import configure_logging, get_correlation_id
#   configure_logging("INFO")
#   logger.info("...")  # -> "... [corr=3f2a...] ..."
# =============================================================================

import contextvars
import logging
import sys
import uuid
from typing import Any

from core.constants import SENSITIVE_FIELDS

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [corr=%(correlation_id)s] %(message)s"

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def generate_correlation_id() -> str:
    """New random correlation ID."""
    return str(uuid.uuid4())


def get_correlation_id() -> str | None:
    """Correlation ID of the current request/task, if any."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> contextvars.Token:
    """Bind a correlation ID to the current context. Returns a reset token."""
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    """Restore the correlation ID that was active before set_correlation_id()."""
    _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Inject `correlation_id` into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the API process or a worker.

    Handlers are attached to stdout with the correlation ID filter so
    third-party loggers get the field too.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )


def sanitize_body(body: Any) -> Any:
    """
    Mask sensitive fields in a request body before it is logged.

    Only top-level keys of dict bodies are inspected.
    """
    if not isinstance(body, dict):
        return body
    return {
        key: "***" if key in SENSITIVE_FIELDS else value
        for key, value in body.items()
    }
