# =============================================================================
# lib/sentry.py - Error Tracking
# =============================================================================
# Thin wrapper around sentry_sdk. When Sentry is disabled or has no DSN,
# captured exceptions are logged instead so nothing is silently dropped.
# =============================================================================

import logging
from typing import Any, Literal

import sentry_sdk

from app.config import settings

logger = logging.getLogger(__name__)

_initialized = False

Level = Literal["fatal", "error", "warning", "info", "debug"]


def init_sentry() -> bool:
    """
    Initialize Sentry if ENABLE_SENTRY and SENTRY_DSN are set.

    Returns:
        True if Sentry is active after the call
    """
    global _initialized

    if _initialized:
        return True

    if not (settings.ENABLE_SENTRY and settings.SENTRY_DSN):
        logger.debug("Sentry is disabled or DSN is not configured")
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        debug=not settings.is_production,
        max_breadcrumbs=50,
    )
    _initialized = True
    logger.info(f"Sentry initialized for environment: {settings.ENVIRONMENT}")
    return True


def is_initialized() -> bool:
    return _initialized


def capture_exception(error: BaseException, context: dict[str, Any] | None = None) -> None:
    """Forward an exception to Sentry with request context attached."""
    if _initialized:
        with sentry_sdk.new_scope() as scope:
            if context:
                scope.set_context("app", context)
            sentry_sdk.capture_exception(error)
    else:
        logger.error(f"Exception: {error!r} context={context}")


def capture_message(message: str, level: Level = "info") -> None:
    if _initialized:
        sentry_sdk.capture_message(message, level=level)
    else:
        logger.info(message)


def set_user_context(user_id: str, email: str | None = None) -> None:
    if _initialized:
        sentry_sdk.set_user({"id": user_id, "email": email})


def clear_user_context() -> None:
    if _initialized:
        sentry_sdk.set_user(None)
