"""
property_api/auth_context.py

Authentication primitives for FastAPI dependency injection.

Contains:
- AuthContext: Immutable identity derived from a verified bearer token
- require_auth_context: dependency for routes that need a caller identity
- optional_auth_context: dependency for public routes that accept a token

The identity is built from token claims alone. The account row is NOT
re-read, so a role change takes effect only when the caller logs in again
(tokens live ACCESS_TOKEN_HOURS).
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict

from property_api.errors import AuthenticationError
from property_api.models import UserRole
from property_api.security import verify_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing or non-Bearer header yields None and we raise our own 401
security = HTTPBearer(auto_error=False)


class AuthContext(BaseModel):
    """
    Caller identity for protected endpoints.

    Never trust account ids from request bodies or query params; ownership
    checks compare against ``account_id`` here.

    Fields:
        account_id: Account id from the ``sub`` claim
        email: Account email at token issuance
        role: Account role at token issuance (agent/admin)
    """
    model_config = ConfigDict(frozen=True)

    account_id: str
    email: str
    role: UserRole


def context_from_token(token: str) -> AuthContext:
    """Verify a bearer token and build the AuthContext from its claims."""
    payload = verify_token(token)
    account_id = payload.get("sub")
    role = payload.get("role")

    if not account_id or not isinstance(role, str) or role not in {r.value for r in UserRole}:
        logger.info("[AUTH] Token payload missing sub or carrying unknown role")
        raise AuthenticationError("Invalid token payload")

    return AuthContext(account_id=str(account_id), email=str(payload.get("email", "")), role=role)


def require_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthContext:
    """
    Auth dependency for routes that require a caller identity.

    Usage:
        @router.post("", dependencies=AGENT_ONLY)
        def create(ctx: AuthContext = Depends(require_auth_context)):
            ...

    Raises:
        AuthenticationError(401): Header missing/malformed, token invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing or invalid authorization header")

    ctx = context_from_token(credentials.credentials)
    logger.debug("[AUTH] Authenticated: account_id=%s, role=%s", ctx.account_id, ctx.role.value)
    return ctx


def optional_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthContext]:
    """Like require_auth_context, but anonymous callers get None.

    A token that is sent must still be valid.
    """
    if credentials is None:
        return None
    return context_from_token(credentials.credentials)
