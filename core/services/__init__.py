# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .user_service import UserService
from .stellar_service import StellarService, get_stellar_service
from .issuer_service import IssuerService
from .email_service import EmailService
from .email_queue_service import EmailQueueService
from .certificate_service import CertificateService

__all__ = [
    "UserService",
    "StellarService",
    "get_stellar_service",
    "IssuerService",
    "EmailService",
    "EmailQueueService",
    "CertificateService",
]
