"""
property_api/accounts.py

Account service: registration and login.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Tuple

from property_api import store
from property_api.db import get_db_connection
from property_api.errors import AuthenticationError, ConflictError, ValidationError
from property_api.models import Account, UserRole
from property_api.rbac import is_valid_role
from property_api.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password (no account enumeration)
INVALID_CREDENTIALS = "Invalid email or password"


def _missing(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def register(name: Optional[str], email: Optional[str], password: Optional[str], role: Optional[str]) -> Account:
    """
    Create an account with a hashed password.

    Raises:
        ValidationError: A field is missing or the role is unknown
        ConflictError: The email is already registered
    """
    if any(_missing(value) for value in (name, email, password, role)):
        raise ValidationError("Name, email, password, and role are required")

    if not is_valid_role(role):
        raise ValidationError("Role must be agent or admin")

    with get_db_connection() as conn:
        if store.get_account_by_email(conn, email) is not None:
            logger.info("[REGISTER] Duplicate email rejected")
            raise ConflictError("Email already registered")

        account = Account(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole(role),
        )
        store.insert_account(conn, account)

    logger.info("[REGISTER] Account created: account_id=%s, role=%s", account.id, account.role.value)
    return account


def login(email: Optional[str], password: Optional[str]) -> Tuple[str, Account]:
    """
    Verify credentials and issue a bearer token.

    Returns:
        (token, account)

    Raises:
        ValidationError: email or password missing
        AuthenticationError: unknown email or wrong password
    """
    if _missing(email) or _missing(password):
        raise ValidationError("Email and password are required")

    with get_db_connection() as conn:
        account = store.get_account_by_email(conn, email)

    if account is None:
        logger.info("[LOGIN] Account not found by email")
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not verify_password(password, account.password_hash):
        logger.info("[LOGIN] Password verification failed: account_id=%s", account.id)
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = create_access_token(account.id, account.email, account.role.value)
    logger.info("[LOGIN] Token issued: account_id=%s, role=%s", account.id, account.role.value)
    return token, account
