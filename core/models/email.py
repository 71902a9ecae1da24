# =============================================================================
# core/models/email.py - Email Job Schemas
# =============================================================================
# Payloads accepted by the email endpoints and carried by the email tasks.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, EmailStr, Field, HttpUrl


class EmailJobType(str, Enum):
    """Job names on the email queue."""
    SEND_EMAIL = "send-email"
    SEND_CERTIFICATE_ISSUED = "send-certificate-issued"
    SEND_VERIFICATION = "send-verification"
    SEND_PASSWORD_RESET = "send-password-reset"
    SEND_REVOCATION = "send-revocation"


class SendEmailRequest(BaseModel):
    """Generic templated email."""
    to: EmailStr
    subject: str = Field(..., min_length=1)
    template: str = Field(..., min_length=1, examples=["certificate-issued"])
    data: dict[str, Any] | None = None


class SendCertificateIssuedRequest(BaseModel):
    to: EmailStr
    certificate_id: str = Field(..., min_length=1)
    recipient_name: str = Field(..., min_length=1)
    certificate_name: str = Field(..., min_length=1)
    issuer_name: str = Field(..., min_length=1)


class SendVerificationRequest(BaseModel):
    to: EmailStr
    user_name: str = Field(..., min_length=1)
    verification_link: HttpUrl


class SendPasswordResetRequest(BaseModel):
    to: EmailStr
    user_name: str = Field(..., min_length=1)
    reset_link: HttpUrl


class SendRevocationNoticeRequest(BaseModel):
    to: EmailStr
    recipient_name: str = Field(..., min_length=1)
    certificate_id: str = Field(..., min_length=1)
    certificate_name: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    revocation_date: datetime


class EmailJobResponse(BaseModel):
    """
    Result of queueing an email.

    success is False (with HTTP 200) when the queue rejected the job.
    """
    success: bool
    message: str
    job_id: str | None = None


class QueueStats(BaseModel):
    """Live snapshot of the email workers plus completed/failed totals."""
    active: int
    scheduled: int
    reserved: int
    completed: int
    failed: int
    workers: int
