# =============================================================================
# app/auth/tokens.py - JWT Access Tokens
# =============================================================================
# Tokens are signed with JWT_SECRET (HS256 by default) and carry the user's
# id, email and role so requests can be authorized without a database hit.
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.exceptions import AuthException, ErrorCode

logger = logging.getLogger(__name__)


def create_access_token(user: dict[str, Any]) -> str:
    """
    Create a signed access token for a users row.

    Args:
        user: Dict with at least id, email and role

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user["id"]),
        "email": user.get("email"),
        "role": user.get("role"),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.JWT_EXPIRES_IN_MINUTES)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a token and return its claims.

    Raises:
        AuthException: TOKEN_EXPIRED or TOKEN_INVALID
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        logger.warning("JWT token has expired")
        raise AuthException(ErrorCode.TOKEN_EXPIRED, "Token has expired") from e
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise AuthException(ErrorCode.TOKEN_INVALID, "Invalid token") from e


def token_lifetime_seconds() -> int:
    return settings.JWT_EXPIRES_IN_MINUTES * 60
