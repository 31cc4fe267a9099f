"""
Password hashing and token signing for the reference backend.

Passwords are stored as bcrypt hashes. Access tokens are HS256 JWTs
carrying ``userId``, ``username`` and ``exp``, signed with AUTH_SECRET_KEY.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from fanhub.core.config import settings

ALGORITHM = "HS256"
# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))


def create_access_token(
    user_id: str, username: str, secret: str | None = None, ttl: int | None = None
) -> str:
    secret = secret or settings.AUTH_SECRET_KEY
    ttl = ttl if ttl is not None else settings.TOKEN_TTL_SECONDS
    payload = {
        "userId": user_id,
        "username": username,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=ttl),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_access_token(token: str, secret: str | None = None) -> dict[str, Any] | None:
    """Return the token claims, or None when the token is forged, malformed or expired."""
    try:
        return jwt.decode(
            token,
            secret or settings.AUTH_SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.InvalidTokenError:
        return None
