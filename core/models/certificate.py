# =============================================================================
# core/models/certificate.py - Certificate Schemas
# =============================================================================
# These models define the API contract for certificate operations:
# - CertificateCreate / CertificateUpdate: Input for issuing and editing
# - CertificateRevokeRequest: Input for revocation
# - CertificateResponse: Stored certificate plus its derived status
# - CertificateVerification: Public verification result
#
# Status is never stored; it is derived from is_revoked, expires_at and
# issued_at (see CertificateService.derive_status).
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from core.constants import CertificateStatus
from .common import PaginationMeta


class CertificateCreate(BaseModel):
    """
    Input for issuing a certificate.

    certificate_id and issued_at are filled in by the service when omitted.

    Example:
        {
            "title": "Blockchain Fundamentals",
            "issuer_name": "Stellar University",
            "recipient_email": "ada@example.com",
            "recipient_name": "Ada Lovelace"
        }
    """
    certificate_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=64,
        description="Human-facing ID; generated as CERT-XXXXXXXXXXXX when omitted",
    )
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    content: str | None = None
    issuer_name: str = Field(..., min_length=1, max_length=255)
    issuer_id: UUID | None = None
    recipient_email: EmailStr
    recipient_name: str | None = Field(default=None, max_length=255)
    recipient_public_key: str | None = Field(default=None, description="Stellar public key")
    issued_at: datetime | None = None
    expires_at: datetime | None = None
    blockchain_tx_hash: str | None = Field(
        default=None,
        description="64 lowercase hex characters",
    )


class CertificateUpdate(BaseModel):
    """Partial update. Revoked certificates can't be edited."""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    content: str | None = None
    recipient_name: str | None = Field(default=None, max_length=255)
    recipient_public_key: str | None = None
    expires_at: datetime | None = None
    blockchain_tx_hash: str | None = None


class CertificateRevokeRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500, examples=["Issued in error"])


class CertificateResponse(BaseModel):
    id: UUID
    certificate_id: str
    title: str
    description: str | None = None
    content: str | None = None
    issuer_name: str
    issuer_id: UUID | None = None
    recipient_email: str
    recipient_name: str | None = None
    recipient_public_key: str | None = None
    issued_at: datetime | None = None
    expires_at: datetime | None = None
    is_revoked: bool = False
    revocation_reason: str | None = None
    revoked_at: datetime | None = None
    blockchain_tx_hash: str | None = None
    status: CertificateStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CertificateList(BaseModel):
    data: list[CertificateResponse]
    pagination: PaginationMeta


class CertificateVerification(BaseModel):
    """
    Public verification result.

    blockchain_verified is None when no transaction hash is stored.
    """
    certificate_id: str
    status: CertificateStatus
    is_valid: bool
    is_revoked: bool
    is_expired: bool
    blockchain_verified: bool | None = None
    verified_at: datetime
