# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Liveness, readiness and dependency checks
# - metrics.py: Prometheus scrape endpoint
# - users.py: User profile endpoints
# - issuers.py: Issuer CRUD and Stellar account check
# - certificates.py: Certificate issuing, revocation and verification
# - stellar.py: Direct Stellar lookups
# - email.py: Email queue endpoints
#
# Each router is mounted in main.py under the /api prefix.
# =============================================================================

from . import health
from . import metrics
from . import users
from . import issuers
from . import certificates
from . import stellar
from . import email

__all__ = [
    "health",
    "metrics",
    "users",
    "issuers",
    "certificates",
    "stellar",
    "email",
]
