# =============================================================================
# core/models/issuer.py - Issuer Schemas
# =============================================================================
# An issuer is an organisation allowed to issue certificates, identified on
# the Stellar network by its ed25519 public key.
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .common import PaginationMeta

PUBLIC_KEY_EXAMPLE = "GBRPYHIL2CI3FNQ4BXLFMNDLFJUNPU2HY3ZMFSHONUCEOASW7QC7OX2H"


class IssuerCreate(BaseModel):
    """Input for registering a new issuer."""
    name: str = Field(..., min_length=1, max_length=255, examples=["Stellar University"])
    public_key: str = Field(
        ...,
        description="Stellar public key (G..., 56 characters)",
        examples=[PUBLIC_KEY_EXAMPLE],
    )
    description: str | None = None
    website: str | None = Field(default=None, max_length=255)
    contact_email: EmailStr | None = None
    is_active: bool = True


class IssuerUpdate(BaseModel):
    """Partial update for an issuer. Omitted fields are left as-is."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    public_key: str | None = None
    description: str | None = None
    website: str | None = Field(default=None, max_length=255)
    contact_email: EmailStr | None = None
    is_active: bool | None = None


class IssuerResponse(BaseModel):
    id: UUID
    name: str
    public_key: str
    description: str | None = None
    website: str | None = None
    contact_email: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class IssuerList(BaseModel):
    data: list[IssuerResponse]
    pagination: PaginationMeta


class IssuerAccountVerification(BaseModel):
    """Whether an issuer's public key exists on the Stellar network."""
    issuer_id: UUID
    public_key: str
    network: str
    exists: bool
