# =============================================================================
# workers/celery_app.py - Celery Application Configuration
# =============================================================================
# This module creates and configures the Celery application instance and
# hooks task lifecycle signals into logging.
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q email --loglevel=info
#
#   # Check status
#   celery -A workers.celery_app status
# =============================================================================

import logging

from celery import Celery
from celery.signals import (
    setup_logging,
    task_failure,
    task_postrun,
    task_prerun,
    task_retry,
    worker_process_init,
)
from celery.utils.log import current_process_index
from dotenv import load_dotenv
from prometheus_client import start_http_server

# Load environment variables
load_dotenv()

from app.config import settings
from lib.log_context import configure_logging, set_correlation_id
from lib.metrics import get_metrics_collector
from workers import job_stats

logger = logging.getLogger(__name__)


def _redact(url: str) -> str:
    """Hide credentials in a broker URL."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """
    Create and configure Celery application.

    Returns:
        Configured Celery app instance
    """
    app = Celery(
        "stellarwave_worker",
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["workers.tasks"],  # Auto-discover tasks
    )

    # Load configuration
    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Celery app created with broker: {_redact(settings.REDIS_URL)}")

    return app


# Create the Celery app instance
celery_app = create_celery_app()


# =============================================================================
# Celery Signals (Lifecycle Hooks)
# =============================================================================

@setup_logging.connect
def setup_logging_handler(**kwargs):
    """Use the API's log format (with correlation IDs) in workers."""
    configure_logging(settings.LOG_LEVEL)


@worker_process_init.connect
def start_metrics_server(**kwargs):
    """
    Serve this process's metrics registry over HTTP.

    Job counters are incremented inside the pool processes, so each one
    exposes /metrics itself: child N listens on WORKER_METRICS_PORT + N.
    """
    if not settings.WORKER_METRICS_PORT:
        return

    port = settings.WORKER_METRICS_PORT + (current_process_index(base=0) or 0)
    try:
        start_http_server(port, registry=get_metrics_collector().registry)
    except OSError as e:
        logger.error(f"Could not serve worker metrics on port {port}: {e}")
        return
    logger.info(f"Worker metrics served on port {port}")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, **extra):
    """Bind the producer's correlation ID and log when a task starts."""
    set_correlation_id((kwargs or {}).get("correlation_id"))
    logger.info(f"Task started: {task.name} [{task_id}] attempt {task.request.retries + 1}")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, retval=None, state=None, **extra):
    """Log when a task completes."""
    logger.info(f"Task completed: {task.name} [{task_id}] - State: {state}")
    set_correlation_id(None)


@task_retry.connect
def task_retry_handler(sender=None, request=None, reason=None, **extra):
    """Log each scheduled retry."""
    logger.warning(f"Task retry scheduled: {sender.name} [{request.id}] - Reason: {reason}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, traceback=None, **extra):
    """
    Log a job that exhausted its retries.

    Failed results stay in the result backend; the failure is also counted
    for the queue stats.
    """
    attempts = sender.request.retries + 1
    logger.error(f"Job {sender.name} [{task_id}] failed after {attempts} attempts: {exception!r}")
    get_metrics_collector().record_email_job(sender.name.removeprefix("email."), success=False)
    job_stats.record_outcome(success=False)


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    celery_app.start()
