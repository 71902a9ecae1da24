# =============================================================================
# core/services/email_queue_service.py - Email Job Producer
# =============================================================================
# Puts email jobs on the Celery queue and reports queue statistics.
# Payloads travel as JSON; the producer's correlation ID rides along so
# worker logs can be matched to the request that queued the job.
# =============================================================================

import logging
from typing import Any

from pydantic import BaseModel

from core.models.email import (
    EmailJobType,
    SendCertificateIssuedRequest,
    SendEmailRequest,
    SendPasswordResetRequest,
    SendRevocationNoticeRequest,
    SendVerificationRequest,
)
from lib.log_context import get_correlation_id
from workers.celery_app import celery_app
from workers import job_stats, tasks

logger = logging.getLogger(__name__)

INSPECT_TIMEOUT_SECONDS = 1.0


class EmailQueueService:
    """
    Producer side of the email queue.

    Every queue_* method returns the Celery job id. Enqueue failures (e.g.
    Redis unreachable) are logged and re-raised.
    """

    @staticmethod
    def _enqueue(task, job_type: EmailJobType, payload: BaseModel) -> str:
        try:
            result = task.apply_async(kwargs={
                "payload": payload.model_dump(mode="json"),
                "correlation_id": get_correlation_id(),
            })
        except Exception as e:
            logger.error(f"Failed to queue {job_type.value} email: {e}")
            raise

        logger.info(f"Queued {job_type.value} job {result.id}")
        return result.id

    @staticmethod
    def queue_email(request: SendEmailRequest) -> str:
        return EmailQueueService._enqueue(tasks.send_email, EmailJobType.SEND_EMAIL, request)

    @staticmethod
    def queue_certificate_issued(request: SendCertificateIssuedRequest) -> str:
        return EmailQueueService._enqueue(
            tasks.send_certificate_issued, EmailJobType.SEND_CERTIFICATE_ISSUED, request
        )

    @staticmethod
    def queue_verification_email(request: SendVerificationRequest) -> str:
        return EmailQueueService._enqueue(
            tasks.send_verification_email, EmailJobType.SEND_VERIFICATION, request
        )

    @staticmethod
    def queue_password_reset(request: SendPasswordResetRequest) -> str:
        return EmailQueueService._enqueue(
            tasks.send_password_reset, EmailJobType.SEND_PASSWORD_RESET, request
        )

    @staticmethod
    def queue_revocation_notice(request: SendRevocationNoticeRequest) -> str:
        return EmailQueueService._enqueue(
            tasks.send_revocation_notice, EmailJobType.SEND_REVOCATION, request
        )

    @staticmethod
    def get_queue_stats() -> dict[str, int]:
        """
        Count active, scheduled and reserved jobs across live workers, plus
        completed and failed jobs so far.

        Live counts are zero when no worker answers within the inspect
        timeout.

        Raises:
            redis.RedisError: If the job counters can't be read
        """
        inspector = celery_app.control.inspect(timeout=INSPECT_TIMEOUT_SECONDS)

        def count(replies: dict[str, list[Any]] | None) -> int:
            return sum(len(jobs) for jobs in (replies or {}).values())

        active = inspector.active()
        scheduled = inspector.scheduled()
        reserved = inspector.reserved()
        workers = set(active or {}) | set(scheduled or {}) | set(reserved or {})
        outcomes = job_stats.read_outcomes()

        return {
            "active": count(active),
            "scheduled": count(scheduled),
            "reserved": count(reserved),
            "completed": outcomes["completed"],
            "failed": outcomes["failed"],
            "workers": len(workers),
        }
