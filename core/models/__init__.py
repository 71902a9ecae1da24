# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - common.py: Pagination and error envelope
# - user.py: User profile schemas
# - issuer.py: Issuer CRUD schemas
# - certificate.py: Certificate CRUD, revocation and verification schemas
# - email.py: Email job payloads
#
# These models define the "contract" between API and clients.
# =============================================================================

from .common import DeleteResponse, ErrorResponse, PaginationMeta
from .user import UserResponse, UserUpdate
from .issuer import (
    IssuerAccountVerification,
    IssuerCreate,
    IssuerList,
    IssuerResponse,
    IssuerUpdate,
)
from .certificate import (
    CertificateCreate,
    CertificateList,
    CertificateResponse,
    CertificateRevokeRequest,
    CertificateUpdate,
    CertificateVerification,
)
from .email import (
    EmailJobResponse,
    EmailJobType,
    QueueStats,
    SendCertificateIssuedRequest,
    SendEmailRequest,
    SendPasswordResetRequest,
    SendRevocationNoticeRequest,
    SendVerificationRequest,
)

__all__ = [
    # Common
    "DeleteResponse",
    "ErrorResponse",
    "PaginationMeta",
    # Users
    "UserResponse",
    "UserUpdate",
    # Issuers
    "IssuerAccountVerification",
    "IssuerCreate",
    "IssuerList",
    "IssuerResponse",
    "IssuerUpdate",
    # Certificates
    "CertificateCreate",
    "CertificateList",
    "CertificateResponse",
    "CertificateRevokeRequest",
    "CertificateUpdate",
    "CertificateVerification",
    # Email
    "EmailJobResponse",
    "EmailJobType",
    "QueueStats",
    "SendCertificateIssuedRequest",
    "SendEmailRequest",
    "SendPasswordResetRequest",
    "SendRevocationNoticeRequest",
    "SendVerificationRequest",
]
