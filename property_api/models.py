from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# Enums
class UserRole(str, Enum):
    agent = "agent"
    admin = "admin"


class ListingStatus(str, Enum):
    available = "available"
    sold = "sold"


# Models
class Account(BaseModel):
    id: str
    name: str
    email: str
    password_hash: str = Field(repr=False)
    role: UserRole
    created_at: datetime = Field(default_factory=utc_now)


class OwnerSummary(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole


class Listing(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    price: float
    location: str
    status: ListingStatus = ListingStatus.available
    created_by: str
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    owner: Optional[OwnerSummary] = None  # populated on reads only
