# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Handles user CRUD and credential checks.
# Rows returned to callers never include the password hash.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import AuthException, ConflictException, ErrorCode, NotFoundException
from core.constants import UserRole
from core.security import hash_password, verify_password
from lib.metrics import get_metrics_collector
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "users"


def strip_password(user: dict[str, Any]) -> dict[str, Any]:
    """Copy of a users row without the password hash."""
    return {key: value for key, value in user.items() if key != "password"}


class UserService:
    """
    Service for user management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def find_by_email(email: str) -> dict[str, Any] | None:
        """Raw users row (password included) for an email, or None."""
        return SupabaseClient.fetch_by_field(TABLE, "email", email.strip().lower())

    @staticmethod
    def find_by_id(user_id: str | UUID) -> dict[str, Any] | None:
        """Raw users row for an id, or None."""
        return SupabaseClient.fetch_record(TABLE, user_id)

    @staticmethod
    def get_user(user_id: str | UUID) -> dict[str, Any]:
        """
        Get a user by ID without the password hash.

        Raises:
            NotFoundException: If the user doesn't exist
        """
        user = UserService.find_by_id(user_id)
        if not user:
            raise NotFoundException(f"User {user_id} not found")
        return strip_password(user)

    @staticmethod
    def create(
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> dict[str, Any]:
        """
        Create a user with a bcrypt-hashed password.

        Raises:
            ConflictException: If the email is already registered
        """
        email = email.strip().lower()
        if UserService.find_by_email(email):
            raise ConflictException("Email already registered", details={"email": email})

        user = SupabaseClient.insert_record(TABLE, {
            "email": email,
            "password": hash_password(password),
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
            "role": UserRole(role).value,
            "is_active": True,
        })
        logger.info(f"Created user: {user['id']}")
        return strip_password(user)

    @staticmethod
    def update(user_id: str | UUID, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update. None values are ignored.

        Raises:
            NotFoundException: If the user doesn't exist
        """
        data = {
            key: value.value if isinstance(value, UserRole) else value
            for key, value in changes.items()
            if value is not None
        }

        if not data:
            return UserService.get_user(user_id)

        data["updated_at"] = utc_now_iso()
        user = SupabaseClient.update_record(TABLE, user_id, data)
        if not user:
            raise NotFoundException(f"User {user_id} not found")

        logger.info(f"Updated user {user_id}: {sorted(k for k in data if k != 'updated_at')}")
        return strip_password(user)

    @staticmethod
    def remove(user_id: str | UUID) -> None:
        """
        Delete a user.

        Raises:
            NotFoundException: If the user doesn't exist
        """
        if not SupabaseClient.delete_record(TABLE, user_id):
            raise NotFoundException(f"User {user_id} not found")
        logger.info(f"Deleted user: {user_id}")

    @staticmethod
    def authenticate(email: str, password: str) -> dict[str, Any]:
        """
        Check credentials and return the user without the password hash.

        Unknown email, wrong password and deactivated accounts all fail the
        same way so callers can't probe which emails exist.

        Raises:
            AuthException: INVALID_CREDENTIALS
        """
        metrics = get_metrics_collector()
        user = UserService.find_by_email(email)

        if not user or not verify_password(password, user.get("password")):
            metrics.record_authentication_attempt(success=False)
            logger.warning(f"Failed login attempt for {email}")
            raise AuthException(ErrorCode.INVALID_CREDENTIALS)

        if not user.get("is_active", True):
            metrics.record_authentication_attempt(success=False)
            logger.warning(f"Login attempt for inactive user {user['id']}")
            raise AuthException(ErrorCode.INVALID_CREDENTIALS)

        metrics.record_authentication_attempt(success=True)
        return strip_password(user)
