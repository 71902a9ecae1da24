# =============================================================================
# app/routers/users.py - User Endpoints
# =============================================================================
# Reading is open to any authenticated user. Users may update their own
# profile; admins may update anyone and are the only ones who can change
# `role` and `is_active`, or delete accounts.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_current_user, require_roles
from app.exceptions import AuthException, ErrorCode
from core.constants import UserRole
from core.models.common import DeleteResponse
from core.models.user import UserResponse, UserUpdate
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

ADMIN_ONLY_FIELDS = ("is_active", "role")


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Get a user's profile."""
    return UserService.get_user(user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
    request: UserUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update a user's profile.

    Raises:
        403: Updating another user without admin role, or setting an
            admin-only field
        404: If the user doesn't exist
    """
    is_admin = user.role == UserRole.ADMIN

    if user.id != user_id and not is_admin:
        raise AuthException(
            ErrorCode.INSUFFICIENT_PERMISSIONS,
            "You can only update your own profile",
        )

    changes = request.model_dump(exclude_unset=True)
    restricted = [field for field in ADMIN_ONLY_FIELDS if field in changes]
    if restricted and not is_admin:
        raise AuthException(
            ErrorCode.INSUFFICIENT_PERMISSIONS,
            f"Only admins can change: {', '.join(restricted)}",
        )

    return UserService.update(user_id, changes)


@router.delete("/{user_id}", response_model=DeleteResponse)
def delete_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
    user: AuthUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Delete a user (admin only)."""
    UserService.remove(user_id)
    logger.info(f"User {user_id} deleted by {user.id}")
    return DeleteResponse(id=str(user_id), message="User deleted successfully")
