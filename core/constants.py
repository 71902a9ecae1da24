# =============================================================================
# core/constants.py - Shared Constants
# =============================================================================
# Roles, role hierarchy, Stellar formats and pagination limits shared by
# the API layer and the services.
# =============================================================================

import re
from enum import Enum


class UserRole(str, Enum):
    """Roles a user can hold."""
    ADMIN = "admin"
    ISSUER = "issuer"
    USER = "user"
    AUDITOR = "auditor"


# Roles each role may act as
ROLE_HIERARCHY: dict[UserRole, set[UserRole]] = {
    UserRole.ADMIN: {UserRole.ADMIN, UserRole.ISSUER, UserRole.USER, UserRole.AUDITOR},
    UserRole.ISSUER: {UserRole.ISSUER, UserRole.USER},
    UserRole.AUDITOR: {UserRole.AUDITOR, UserRole.USER},
    UserRole.USER: {UserRole.USER},
}


class CertificateStatus(str, Enum):
    """Derived lifecycle state of a certificate."""
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


STELLAR_ADDRESS_REGEX = re.compile(r"^G[A-Z0-9]{55}$")
STELLAR_TRANSACTION_HASH_REGEX = re.compile(r"^[a-f0-9]{64}$")

API_PREFIX = "/api"

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Request body fields masked before logging
SENSITIVE_FIELDS = ("password", "token", "secret", "apiKey")
