"""
Security Service

Handles password hashing and JWT access tokens.

Usage:
    from bookreviews.services.security import hash_password, verify_password

    hashed = hash_password("SecurePass123")
    is_valid = verify_password("SecurePass123", hashed)
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from bookreviews.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# bcrypt; "auto" upgrades hashes made with deprecated schemes on verify
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Example:
        >>> hash_password("SecurePass123").startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to encode; callers put the user ID in "sub"
        expires_delta: Lifetime, defaults to settings.access_token_expire_minutes

    Returns:
        Encoded JWT string
    """
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(UTC) + expires_delta

    to_encode.update({"exp": expire, "type": "access"})

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict | None:
    """
    Decode and validate a JWT.

    Returns:
        The payload, or None if the token is invalid, expired or not an
        access token
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        return None

    if payload.get("type") != "access":
        logger.warning("Token type mismatch: expected access")
        return None

    return payload
