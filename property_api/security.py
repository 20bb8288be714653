"""Password hashing and bearer token helpers."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from property_api.config import ACCESS_TOKEN_HOURS, ALGORITHM, SECRET_KEY
from property_api.errors import AuthenticationError

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unknown or corrupt hash format
        return False


def create_access_token(
    account_id: str,
    email: str,
    role: str,
    *,
    expires_in: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    """Sign a JWT carrying the account identity and role."""
    issued_at = now or datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(hours=ACCESS_TOKEN_HOURS)
    payload = {
        "sub": account_id,
        "email": email,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        AuthenticationError: If token is expired or invalid
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")


__all__ = ["hash_password", "verify_password", "create_access_token", "verify_token"]
