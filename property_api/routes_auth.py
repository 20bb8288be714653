"""
property_api/routes_auth.py

Registration and login endpoints. Both are public.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from property_api import accounts
from property_api.schemas import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, UserResponse

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest) -> RegisterResponse:
    """
    Register an agent or admin account.

    Raises:
        ValidationError(400): Missing field or unknown role
        ConflictError(400): Email already registered
    """
    account = accounts.register(request.name, request.email, request.password, request.role)
    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.from_account(account),
    )


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest) -> LoginResponse:
    """
    Exchange email + password for a 24h bearer token.

    Raises:
        AuthenticationError(401): Unknown email or wrong password (same message)
    """
    token, account = accounts.login(request.email, request.password)
    return LoginResponse(
        message="Login successful",
        token=token,
        user=UserResponse.from_account(account),
    )
