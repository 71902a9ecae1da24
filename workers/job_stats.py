# =============================================================================
# workers/job_stats.py - Email Job Outcome Counters
# =============================================================================
# Completed and failed job counts live in a Redis hash so the API can report
# them next to the live queue snapshot. Celery only keeps failed results
# (task_ignore_result), so the result backend alone can't count successes.
#
# Usage:
#   from workers import job_stats
#   job_stats.record_outcome(success=True)     # worker side
#   job_stats.read_outcomes()                  # {"completed": 12, "failed": 1}
# =============================================================================

import logging
from functools import lru_cache

import redis

from app.config import settings

logger = logging.getLogger(__name__)

JOB_STATS_KEY = "stellarwave:email-jobs"
REDIS_TIMEOUT_SECONDS = 2


@lru_cache
def get_redis() -> redis.Redis:
    """Shared Redis connection pool for the counters."""
    return redis.Redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=REDIS_TIMEOUT_SECONDS,
        socket_timeout=REDIS_TIMEOUT_SECONDS,
    )


def record_outcome(success: bool) -> None:
    """
    Count one finished job.

    A Redis error is logged and not raised: the email itself was already
    sent (or has already failed for good).
    """
    field = "completed" if success else "failed"
    try:
        get_redis().hincrby(JOB_STATS_KEY, field, 1)
    except redis.RedisError as e:
        logger.warning(f"Could not record {field} email job: {e}")


def read_outcomes() -> dict[str, int]:
    """
    Completed and failed job counts since the hash was created.

    Raises:
        redis.RedisError: If Redis can't be reached
    """
    counts = get_redis().hgetall(JOB_STATS_KEY)
    return {
        "completed": int(counts.get("completed", 0)),
        "failed": int(counts.get("failed", 0)),
    }
