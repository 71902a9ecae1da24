# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# One task per email job type:
# - email.send-email: Generic templated email
# - email.send-certificate-issued
# - email.send-verification
# - email.send-password-reset
# - email.send-revocation
#
# Every task gets 3 attempts in total with exponential backoff (2s, 4s).
# The final failure is logged by the task_failure handler in celery_app.
# =============================================================================

import asyncio
import logging
from typing import Any, Awaitable, Callable

from celery import shared_task
from pydantic import BaseModel

from core.models.email import (
    EmailJobType,
    SendCertificateIssuedRequest,
    SendEmailRequest,
    SendPasswordResetRequest,
    SendRevocationNoticeRequest,
    SendVerificationRequest,
)
from core.services.email_service import EmailService
from lib.metrics import get_metrics_collector
from workers import job_stats

logger = logging.getLogger(__name__)

RETRY_OPTIONS: dict[str, Any] = {
    "autoretry_for": (Exception,),
    "max_retries": 2,
    "retry_backoff": 2,
    "retry_jitter": False,
}


def _run_job(
    task,
    job_type: EmailJobType,
    payload: dict[str, Any],
    model: type[BaseModel],
    send: Callable[[EmailService, Any], Awaitable[None]],
) -> None:
    """Validate the payload, send it, and log the outcome of this attempt."""
    job_id = task.request.id
    attempt = task.request.retries + 1
    logger.info(f"Processing {job_type.value} job {job_id} (attempt {attempt})")

    try:
        request = model.model_validate(payload)
        asyncio.run(send(EmailService(), request))
    except Exception as e:
        logger.error(f"{job_type.value} job {job_id} failed on attempt {attempt}: {e}")
        raise

    get_metrics_collector().record_email_job(job_type.value, success=True)
    job_stats.record_outcome(success=True)
    logger.info(f"{job_type.value} job {job_id} completed successfully")


@shared_task(bind=True, name="email.send-email", **RETRY_OPTIONS)
def send_email(self, payload: dict[str, Any], correlation_id: str | None = None) -> None:
    """Send a generic templated email."""
    _run_job(self, EmailJobType.SEND_EMAIL, payload, SendEmailRequest,
             lambda service, request: service.send_email(request))


@shared_task(bind=True, name="email.send-certificate-issued", **RETRY_OPTIONS)
def send_certificate_issued(self, payload: dict[str, Any], correlation_id: str | None = None) -> None:
    """Notify a recipient that a certificate was issued to them."""
    _run_job(self, EmailJobType.SEND_CERTIFICATE_ISSUED, payload, SendCertificateIssuedRequest,
             lambda service, request: service.send_certificate_issued(request))


@shared_task(bind=True, name="email.send-verification", **RETRY_OPTIONS)
def send_verification_email(self, payload: dict[str, Any], correlation_id: str | None = None) -> None:
    _run_job(self, EmailJobType.SEND_VERIFICATION, payload, SendVerificationRequest,
             lambda service, request: service.send_verification_email(request))


@shared_task(bind=True, name="email.send-password-reset", **RETRY_OPTIONS)
def send_password_reset(self, payload: dict[str, Any], correlation_id: str | None = None) -> None:
    _run_job(self, EmailJobType.SEND_PASSWORD_RESET, payload, SendPasswordResetRequest,
             lambda service, request: service.send_password_reset(request))


@shared_task(bind=True, name="email.send-revocation", **RETRY_OPTIONS)
def send_revocation_notice(self, payload: dict[str, Any], correlation_id: str | None = None) -> None:
    """Tell a recipient their certificate was revoked."""
    _run_job(self, EmailJobType.SEND_REVOCATION, payload, SendRevocationNoticeRequest,
             lambda service, request: service.send_revocation_notice(request))
