"""
property_api/listings.py

Listing service: create, query, read, update and soft delete.

Role policy (agent vs admin) is enforced by the route dependencies in
``rbac``; this module enforces ownership and the soft-delete lifecycle.
A listing moves one way, active -> deleted, and deleted listings are
invisible to every read.
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any, Dict, List, Optional, Tuple

from property_api import store
from property_api.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from property_api.db import get_db_connection
from property_api.errors import NotFoundError, PermissionDeniedError, ValidationError
from property_api.models import Listing, ListingStatus, utc_now
from property_api.store import UPDATABLE_LISTING_FIELDS, ListingFilters

logger = logging.getLogger(__name__)

NOT_FOUND = "Property not found"

# Largest OFFSET the database drivers accept (signed 64-bit)
MAX_OFFSET = 2**63 - 1


def _is_number(value: Any) -> bool:
    """True for a finite int or float (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _parse_status(value: Any) -> ListingStatus:
    try:
        return ListingStatus(value)
    except ValueError:
        raise ValidationError("Status must be available or sold")


def _require_owner(listing: Listing, actor_id: str, action: str) -> None:
    # Identifiers are compared as strings
    if str(listing.created_by) != str(actor_id):
        logger.info(
            "[LISTINGS] Ownership denied: action=%s, listing_id=%s, actor_id=%s",
            action, listing.id, actor_id,
        )
        raise PermissionDeniedError(f"You can only {action} your own properties")


def create(
    actor_id: str,
    title: Optional[str],
    price: Optional[float],
    location: Optional[str],
    description: Optional[str] = None,
    status: Optional[str] = None,
) -> Listing:
    """Create a listing owned by ``actor_id`` (status defaults to available)."""
    if _blank(title) or price is None or _blank(location):
        raise ValidationError("Title, price, and location are required")

    if not _is_number(price):
        raise ValidationError("Price must be a number")

    now = utc_now()
    listing = Listing(
        id=uuid.uuid4().hex,
        title=title,
        description=description,
        price=price,
        location=location,
        status=_parse_status(status) if status is not None else ListingStatus.available,
        created_by=actor_id,
        created_at=now,
        updated_at=now,
    )

    with get_db_connection() as conn:
        store.insert_listing(conn, listing)

    logger.info("[LISTINGS] Created listing_id=%s, owner=%s", listing.id, actor_id)
    return listing


def list_listings(
    filters: Optional[ListingFilters] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_LIMIT,
) -> Tuple[List[Listing], Dict[str, int]]:
    """
    Return one page of active listings plus pagination metadata.

    Returns:
        (listings, {"total", "page", "limit", "pages"})
    """
    filters = filters or ListingFilters()

    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
    if (page - 1) * limit > MAX_OFFSET:
        raise ValidationError("page is out of range")
    if filters.status is not None:
        _parse_status(filters.status)

    with get_db_connection() as conn:
        listings, total = store.query_listings(
            conn,
            filters,
            offset=(page - 1) * limit,
            limit=limit,
        )

    pagination = {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit),
    }
    logger.debug("[LISTINGS] Query filters=%s, page=%s, limit=%s, total=%s", filters, page, limit, total)
    return listings, pagination


def get(listing_id: str) -> Listing:
    with get_db_connection() as conn:
        listing = store.get_active_listing(conn, listing_id)

    if listing is None:
        raise NotFoundError(NOT_FOUND)
    return listing


def update(actor_id: str, listing_id: str, fields: Dict[str, Any]) -> Listing:
    """
    Apply the supplied fields to a listing owned by ``actor_id``.

    Keys with a None value are ignored, so omitted and null fields both
    leave the stored value unchanged.
    """
    unknown = set(fields) - set(UPDATABLE_LISTING_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

    changes = {name: value for name, value in fields.items() if value is not None}

    for name in ("title", "location"):
        if name in changes and _blank(changes[name]):
            raise ValidationError(f"{name.capitalize()} must not be empty")
    if "price" in changes:
        if not _is_number(changes["price"]):
            raise ValidationError("Price must be a number")
        changes["price"] = float(changes["price"])
    if "status" in changes:
        changes["status"] = _parse_status(changes["status"]).value

    with get_db_connection() as conn:
        listing = store.get_active_listing(conn, listing_id)
        if listing is None:
            raise NotFoundError(NOT_FOUND)

        _require_owner(listing, actor_id, "update")

        store.update_listing_fields(conn, listing_id, changes, utc_now())
        updated = store.get_active_listing(conn, listing_id)

    logger.info("[LISTINGS] Updated listing_id=%s, fields=%s", listing_id, sorted(changes))
    return updated


def delete(actor_id: str, listing_id: str) -> None:
    """Soft delete a listing owned by ``actor_id``."""
    with get_db_connection() as conn:
        listing = store.get_active_listing(conn, listing_id)
        if listing is None:
            raise NotFoundError(NOT_FOUND)

        _require_owner(listing, actor_id, "delete")

        store.mark_listing_deleted(conn, listing_id, utc_now())

    logger.info("[LISTINGS] Soft-deleted listing_id=%s by owner=%s", listing_id, actor_id)


def admin_delete(listing_id: str) -> None:
    """Soft delete any listing, regardless of owner."""
    with get_db_connection() as conn:
        if not store.mark_listing_deleted(conn, listing_id, utc_now()):
            raise NotFoundError(NOT_FOUND)

    logger.info("[LISTINGS] Admin soft-deleted listing_id=%s", listing_id)
