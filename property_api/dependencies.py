"""
property_api/dependencies.py

Reusable FastAPI dependencies for role-based authorization.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends

from property_api.auth_context import AuthContext, require_auth_context
from property_api.errors import AuthenticationError, PermissionDeniedError
from property_api.models import UserRole

logger = logging.getLogger(__name__)


def require_role(*allowed_roles: UserRole) -> Callable:
    """
    FastAPI dependency factory that admits only the given roles.

    Must run after authentication; the auth dependency is declared as a
    sub-dependency so FastAPI resolves (and caches) it first.

    Usage in routes:
        @router.post("", dependencies=[Depends(require_auth_context), Depends(require_role(UserRole.agent))])
        def create_property(ctx: AuthContext = Depends(require_auth_context)):
            ...

    Raises:
        AuthenticationError(401): No authenticated identity
        PermissionDeniedError(403): Role not in ``allowed_roles``
    """
    if not allowed_roles:
        raise ValueError("require_role needs at least one role")

    allowed = frozenset(UserRole(role) for role in allowed_roles)

    def _check_role(ctx: Optional[AuthContext] = Depends(require_auth_context)) -> AuthContext:
        if ctx is None:
            raise AuthenticationError("User not authenticated")

        if ctx.role not in allowed:
            logger.info(
                "[AUTHZ] Role denied: account_id=%s, role=%s, allowed=%s",
                ctx.account_id,
                ctx.role.value,
                sorted(role.value for role in allowed),
            )
            raise PermissionDeniedError("You do not have permission to access this resource")

        return ctx

    return _check_role
