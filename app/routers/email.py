# =============================================================================
# app/routers/email.py - Email Queue Endpoints
# =============================================================================
# Queue transactional emails for background delivery. These endpoints only
# enqueue; delivery status lives in the worker logs.
#
# If the queue rejects a job the response is still 200, with
# success=false and a "Failed to queue ..." message.
# =============================================================================

import logging
from typing import Callable

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.auth import AuthUser, get_current_user, require_roles
from core.constants import UserRole
from core.models.email import (
    EmailJobResponse,
    QueueStats,
    SendCertificateIssuedRequest,
    SendPasswordResetRequest,
    SendRevocationNoticeRequest,
    SendVerificationRequest,
)
from core.services.email_queue_service import EmailQueueService

logger = logging.getLogger(__name__)

router = APIRouter()


def _queue(label: str, enqueue: Callable[[BaseModel], str], request: BaseModel) -> EmailJobResponse:
    try:
        job_id = enqueue(request)
    except Exception as e:
        logger.error(f"Error queuing {label}: {e}")
        return EmailJobResponse(success=False, message=f"Failed to queue {label}")

    return EmailJobResponse(success=True, message=f"{label.capitalize()} queued successfully", job_id=job_id)


@router.post("/send-certificate-issued", response_model=EmailJobResponse)
def send_certificate_issued(
    request: SendCertificateIssuedRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Queue a certificate issued notification."""
    return _queue("certificate issued email", EmailQueueService.queue_certificate_issued, request)


@router.post("/send-verification", response_model=EmailJobResponse)
def send_verification(
    request: SendVerificationRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Queue an email address verification message."""
    return _queue("verification email", EmailQueueService.queue_verification_email, request)


@router.post("/send-password-reset", response_model=EmailJobResponse)
def send_password_reset(
    request: SendPasswordResetRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Queue a password reset email. The reset link is supplied by the caller."""
    return _queue("password reset email", EmailQueueService.queue_password_reset, request)


@router.post("/send-revocation-notice", response_model=EmailJobResponse)
def send_revocation_notice(
    request: SendRevocationNoticeRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Queue a certificate revocation notice."""
    return _queue("revocation notice email", EmailQueueService.queue_revocation_notice, request)


@router.get("/queue/stats", response_model=QueueStats)
def queue_stats(
    user: AuthUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Jobs held by email workers, plus completed and failed totals (admin only)."""
    return EmailQueueService.get_queue_stats()
