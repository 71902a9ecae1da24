# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background email delivery.
#
# Components:
# - celery_app.py: Celery application configuration and lifecycle logging
# - tasks.py: Email task definitions, one per job type
# - config.py: Worker-specific settings
# - job_stats.py: Completed/failed job counters in Redis
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q email --loglevel=info
#
#   # Submit task (from API) - prefer EmailQueueService
#   from workers.tasks import send_verification_email
#   result = send_verification_email.apply_async(kwargs={"payload": {...}})
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
