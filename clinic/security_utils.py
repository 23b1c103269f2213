"""
Password hashing and JWT helpers
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    JWT_ALGORITHM,
    REFRESH_TOKEN_EXPIRE_DAYS,
    REFRESH_TOKEN_SECRET,
    SECRET_KEY,
)

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# TOKENS
# ============================================================================


def _encode(data: dict[str, Any], secret: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jose_jwt.encode(to_encode, secret, algorithm=JWT_ALGORITHM)


def _decode(token: str, secret: str) -> Optional[dict[str, Any]]:
    try:
        return jose_jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def create_access_token(
    user_id: int, name: str, email: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a short-lived access token carrying the user's identity and role"""
    return _encode(
        {"sub": str(user_id), "id": user_id, "name": name, "email": email, "role": role},
        SECRET_KEY,
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        {"sub": str(user_id), "id": user_id, "role": role, "type": "refresh"},
        REFRESH_TOKEN_SECRET,
        expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    )


def verify_access_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode an access token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    payload = _decode(token, SECRET_KEY)
    if payload and payload.get("type") == "refresh":
        logger.warning("JWT verification failed: refresh token used as access token")
        return None
    return payload


def verify_refresh_token(token: str) -> Optional[dict[str, Any]]:
    payload = _decode(token, REFRESH_TOKEN_SECRET)
    if payload and payload.get("type") != "refresh":
        logger.warning("JWT verification failed: not a refresh token")
        return None
    return payload
