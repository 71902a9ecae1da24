# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and role checks.
#
# Usage:
#   from app.auth import get_current_user, require_roles, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
#
#   @router.delete("/{id}", dependencies=[Depends(require_roles(UserRole.ADMIN))])
# =============================================================================

import logging
from typing import Callable, Iterable, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.models import AuthUser
from app.auth.tokens import decode_access_token
from app.exceptions import AuthException, ErrorCode
from core.constants import ROLE_HIERARCHY, UserRole

logger = logging.getLogger(__name__)

# Missing headers are reported through AuthException, not FastAPI's 403
security = HTTPBearer(auto_error=False)


def has_required_role(user_role: UserRole | str, required_roles: Iterable[UserRole | str]) -> bool:
    """
    Check a role against the role hierarchy.

    True when any of the required roles is in the set the user's role may
    act as. Unknown roles have no permissions.
    """
    try:
        allowed = ROLE_HIERARCHY[UserRole(user_role)]
    except ValueError:
        return False
    return any(UserRole(role) in allowed for role in required_roles)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Extract and validate the user from the Bearer token.

    Raises:
        AuthException: 401 if the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthException(ErrorCode.UNAUTHORIZED, "Missing authentication token")

    payload = decode_access_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise AuthException(ErrorCode.TOKEN_INVALID, "Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
        role = UserRole(payload.get("role") or UserRole.USER.value)
    except ValueError as e:
        logger.warning(f"Malformed claims in token for sub={user_id}: {e}")
        raise AuthException(ErrorCode.TOKEN_INVALID, "Invalid token: malformed claims") from e

    logger.debug(f"Authenticated user: {user_id} ({role.value})")
    return AuthUser(id=user_uuid, email=payload.get("email"), role=role)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthUser]:
    """
    Optionally get the current user from the JWT.

    Returns None if no token is provided or the token is invalid.
    """
    if credentials is None:
        return None

    try:
        return await get_current_user(credentials)
    except AuthException:
        return None


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that only lets through users holding one of `roles`.

    Raises:
        AuthException: 403 INSUFFICIENT_PERMISSIONS
    """

    async def dependency(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if not has_required_role(user.role, roles):
            raise AuthException(
                ErrorCode.INSUFFICIENT_PERMISSIONS,
                f"User role '{user.role.value}' is not authorized to access this resource",
            )
        return user

    return dependency
