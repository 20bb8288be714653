"""
property_api/schemas.py

Pydantic request/response schemas for auth and property endpoints.

Request bodies forbid unknown fields and use strict types, so a price sent
as a string or an unexpected key is rejected with 400 instead of coerced.
Response schemas never include password hashes or the soft-delete flag.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional, Union

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, Strict, StrictInt, StrictStr, field_validator

from property_api.models import Account, Listing, ListingStatus, UserRole

# JSON numbers only; 1e999 and NaN parse to non-finite floats and are rejected
Price = Union[StrictInt, Annotated[float, Strict(), AllowInfNan(False)]]


class _RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ========================================================================
# AUTH SCHEMAS
# ========================================================================

class RegisterRequest(_RequestModel):
    """Request schema for account registration. All fields required."""
    name: StrictStr = Field(..., max_length=200, description="Display name")
    email: StrictStr = Field(..., max_length=320, description="Login email (unique, stored as given)")
    password: StrictStr = Field(..., max_length=1024, description="Plaintext password (hashed before storage)")
    role: StrictStr = Field(..., description="agent or admin")

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class LoginRequest(_RequestModel):
    email: StrictStr
    password: StrictStr


class UserResponse(BaseModel):
    """Account as returned to clients (no password hash)."""
    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "UserResponse":
        return cls.model_validate(account.model_dump(exclude={"password_hash"}))


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


# ========================================================================
# PROPERTY SCHEMAS
# ========================================================================

class PropertyCreateRequest(_RequestModel):
    """Request schema for creating a listing.

    title, price and location are required; status defaults to available.
    """
    title: StrictStr = Field(..., min_length=1, max_length=300)
    price: Price = Field(..., description="Asking price")
    location: StrictStr = Field(..., min_length=1, max_length=300)
    description: Optional[StrictStr] = Field(None, max_length=10_000)
    status: Optional[ListingStatus] = None


class PropertyUpdateRequest(_RequestModel):
    """Partial update: only the fields present are changed."""
    title: Optional[StrictStr] = Field(None, min_length=1, max_length=300)
    description: Optional[StrictStr] = Field(None, max_length=10_000)
    price: Optional[Price] = None
    location: Optional[StrictStr] = Field(None, min_length=1, max_length=300)
    status: Optional[ListingStatus] = None


class OwnerResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole


class PropertyResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    price: float
    location: str
    status: ListingStatus
    created_by: str
    owner: Optional[OwnerResponse] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_listing(cls, listing: Listing) -> "PropertyResponse":
        return cls.model_validate(listing.model_dump(exclude={"is_deleted"}))


class PaginationResponse(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class PropertyListResponse(BaseModel):
    properties: List[PropertyResponse] = Field(default_factory=list)
    pagination: PaginationResponse


class PropertyDetailResponse(BaseModel):
    property: PropertyResponse


class PropertyMessageResponse(BaseModel):
    message: str
    property: PropertyResponse


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
