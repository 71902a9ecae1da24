# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

import re
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from core.constants import UserRole
from core.models.user import UserResponse
from core.security import PASSWORD_MAX_BYTES

_SPECIAL_CHARACTERS = re.compile(r"[@$!%*?&#^()_\-+=\[\]{};:'\",.<>/\\|`~]")


class AuthUser(BaseModel):
    """
    Authenticated user extracted from the JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str | None = None
    role: UserRole = UserRole.USER


class RegisterRequest(BaseModel):
    """
    Input for creating an account.

    Password must be 8 characters to 72 UTF-8 bytes long and contain an
    uppercase letter, a lowercase letter, a digit and a special character.
    """
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=32)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes when UTF-8 encoded")
        missing = []
        if not re.search(r"[A-Z]", value):
            missing.append("an uppercase letter")
        if not re.search(r"[a-z]", value):
            missing.append("a lowercase letter")
        if not re.search(r"\d", value):
            missing.append("a digit")
        if not _SPECIAL_CHARACTERS.search(value):
            missing.append("a special character")
        if missing:
            raise ValueError(f"Password must contain {', '.join(missing)}")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """Returned by register and login."""
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse
