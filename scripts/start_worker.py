#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker consuming the email queue.
#
# Usage:
#   # Start worker (development)
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker -Q email --loglevel=info
#
# Prerequisites:
#   - Redis must be running and REDIS_URL set
#   - SMTP or SendGrid settings in .env
# =============================================================================

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app
from workers.config import EMAIL_QUEUE

logger = logging.getLogger(__name__)


def main():
    """Start the Celery worker."""
    logger.info("Starting StellarWave email worker")

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        f"--queues={EMAIL_QUEUE}",
        "--concurrency=2",
    ])


if __name__ == "__main__":
    main()
