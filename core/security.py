# =============================================================================
# core/security.py - Password Hashing & Token Helpers
# =============================================================================

import secrets

import bcrypt

BCRYPT_ROUNDS = 12

# bcrypt rejects (5.x) or silently truncates (4.x) anything longer
PASSWORD_MAX_BYTES = 72


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a plain-text password with bcrypt.

    Raises:
        ValueError: If the password is longer than PASSWORD_MAX_BYTES
    """
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password cannot be longer than {PASSWORD_MAX_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    """
    Compare a plain-text password against a bcrypt hash.

    Returns False for missing or malformed hashes instead of raising.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def generate_token(length: int = 32) -> str:
    """Random URL-safe token, e.g. for reset or verification links."""
    return secrets.token_urlsafe(length)[:length]
