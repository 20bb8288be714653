"""
property_api/rbac.py

Role-based access control for listing routes.

Agents manage their own listings; admins may only remove any listing.
Each protected route declares an explicit, ordered interceptor chain:
authenticate first, then authorize by role.
"""

from typing import FrozenSet, List

from fastapi import Depends
from fastapi.params import Depends as DependsParam

from property_api.auth_context import require_auth_context
from property_api.dependencies import require_role
from property_api.models import UserRole


# ============================================================================
# Role Definitions
# ============================================================================

VALID_ROLES: FrozenSet[str] = frozenset(role.value for role in UserRole)


def is_valid_role(role: object) -> bool:
    return isinstance(role, str) and role in VALID_ROLES


# ============================================================================
# Route Policies
# ============================================================================

def interceptors(*roles: UserRole) -> List[DependsParam]:
    """Ordered dependency chain: authenticate, then authorize by role."""
    return [Depends(require_auth_context), Depends(require_role(*roles))]


AGENT_ONLY = interceptors(UserRole.agent)
ADMIN_ONLY = interceptors(UserRole.admin)
