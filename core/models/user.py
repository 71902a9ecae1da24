# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# The password hash is stored on the users row but never appears in any
# response model.
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from core.constants import UserRole


class UserResponse(BaseModel):
    """
    User profile returned by the API.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "email": "ada@example.com",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "phone": null,
            "role": "user",
            "is_active": true,
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-01-15T10:30:00Z"
        }
    """
    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserUpdate(BaseModel):
    """
    Fields a user may change on their profile.

    `is_active` and `role` are only honoured for admins.
    """
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=32)
    is_active: bool | None = Field(default=None, description="Admin only")
    role: UserRole | None = Field(default=None, description="Admin only")
