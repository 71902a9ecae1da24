# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the domain logic:
# - models/: Pydantic schemas for data validation
# - services/: Users, issuers, certificates, Stellar and email
# - constants.py: Roles, role hierarchy, Stellar formats
# - security.py: Password hashing
# - templates/email/: HTML email templates
#
# Services raise app.exceptions errors; routers stay thin.
# =============================================================================
