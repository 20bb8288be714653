"""
property_api/store.py

Persistence gateway for accounts and listings.

All functions take an open connection from ``db.get_db_connection()`` so a
service can group several statements in one transaction. Queries use named
bind parameters only. Listing reads never return soft-deleted rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from property_api.db import execute_query, fetch_all, fetch_one
from property_api.errors import ConflictError
from property_api.models import Account, Listing, OwnerSummary

logger = logging.getLogger(__name__)

# Columns a caller may change on an existing listing
UPDATABLE_LISTING_FIELDS = ("title", "description", "price", "location", "status")

_LISTING_SELECT = """
    SELECT
        l.id,
        l.title,
        l.description,
        l.price,
        l.location,
        l.status,
        l.created_by,
        l.is_deleted,
        l.created_at,
        l.updated_at,
        a.name AS owner_name,
        a.email AS owner_email,
        a.role AS owner_role
    FROM listings l
    LEFT JOIN accounts a ON a.id = l.created_by
"""


def _iso(value: datetime) -> str:
    # Fixed-width timestamps so ORDER BY created_at sorts chronologically
    return value.isoformat(timespec="microseconds")


# ---------------------------------------------------------
# Accounts
# ---------------------------------------------------------
def insert_account(conn: Connection, account: Account) -> None:
    """Insert an account; a duplicate email raises ConflictError."""
    try:
        execute_query(
            conn,
            """
            INSERT INTO accounts (id, name, email, password_hash, role, created_at)
            VALUES (:id, :name, :email, :password_hash, :role, :created_at)
            """,
            {
                "id": account.id,
                "name": account.name,
                "email": account.email,
                "password_hash": account.password_hash,
                "role": account.role.value,
                "created_at": _iso(account.created_at),
            },
        )
    except IntegrityError as exc:
        # Lost the race against a concurrent registration with the same email
        logger.info("[STORE] IntegrityError inserting account: %s", exc.orig)
        raise ConflictError("Email already registered") from exc


def get_account_by_email(conn: Connection, email: str) -> Optional[Account]:
    row = fetch_one(conn, "SELECT * FROM accounts WHERE email = :email", {"email": email})
    return Account(**row) if row else None


# ---------------------------------------------------------
# Listings
# ---------------------------------------------------------
@dataclass(frozen=True)
class ListingFilters:
    """Optional listing query filters, combined with AND."""

    status: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    search: Optional[str] = None


def _like_pattern(term: str) -> str:
    """Case-folded substring pattern with LIKE wildcards escaped."""
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_listing_where(filters: ListingFilters) -> Tuple[str, Dict[str, Any]]:
    """
    Build the WHERE clause for a listing query.

    Soft-deleted rows are always excluded. ``search`` matches title OR
    location; every other filter is ANDed.

    Returns:
        (where_sql, params)
    """
    clauses = ["l.is_deleted = 0"]
    params: Dict[str, Any] = {}

    if filters.status:
        clauses.append("l.status = :status")
        params["status"] = filters.status

    if filters.min_price is not None:
        clauses.append("l.price >= :min_price")
        params["min_price"] = filters.min_price

    if filters.max_price is not None:
        clauses.append("l.price <= :max_price")
        params["max_price"] = filters.max_price

    if filters.search:
        clauses.append(
            "(LOWER(l.title) LIKE :search ESCAPE '\\' OR LOWER(l.location) LIKE :search ESCAPE '\\')"
        )
        params["search"] = _like_pattern(filters.search)

    return " AND ".join(clauses), params


def _row_to_listing(row: Dict[str, Any]) -> Listing:
    owner = None
    if row.get("owner_name") is not None:
        owner = OwnerSummary(
            id=row["created_by"],
            name=row["owner_name"],
            email=row["owner_email"],
            role=row["owner_role"],
        )
    return Listing(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        price=row["price"],
        location=row["location"],
        status=row["status"],
        created_by=row["created_by"],
        is_deleted=bool(row["is_deleted"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        owner=owner,
    )


def insert_listing(conn: Connection, listing: Listing) -> None:
    execute_query(
        conn,
        """
        INSERT INTO listings (
            id, title, description, price, location, status,
            created_by, is_deleted, created_at, updated_at
        ) VALUES (
            :id, :title, :description, :price, :location, :status,
            :created_by, 0, :created_at, :updated_at
        )
        """,
        {
            "id": listing.id,
            "title": listing.title,
            "description": listing.description,
            "price": listing.price,
            "location": listing.location,
            "status": listing.status.value,
            "created_by": listing.created_by,
            "created_at": _iso(listing.created_at),
            "updated_at": _iso(listing.updated_at),
        },
    )


def get_active_listing(conn: Connection, listing_id: str) -> Optional[Listing]:
    """Fetch a non-deleted listing (with owner summary) or None."""
    row = fetch_one(
        conn,
        _LISTING_SELECT + " WHERE l.id = :id AND l.is_deleted = 0",
        {"id": listing_id},
    )
    return _row_to_listing(row) if row else None


def update_listing_fields(
    conn: Connection,
    listing_id: str,
    fields: Dict[str, Any],
    updated_at: datetime,
) -> None:
    """Write ``fields`` (a subset of UPDATABLE_LISTING_FIELDS) to an active listing."""
    unknown = set(fields) - set(UPDATABLE_LISTING_FIELDS)
    if unknown:
        raise ValueError(f"Not updatable: {', '.join(sorted(unknown))}")

    assignments = [f"{name} = :{name}" for name in UPDATABLE_LISTING_FIELDS if name in fields]
    assignments.append("updated_at = :updated_at")
    params = {name: fields[name] for name in UPDATABLE_LISTING_FIELDS if name in fields}
    params.update({"id": listing_id, "updated_at": _iso(updated_at)})

    execute_query(
        conn,
        f"UPDATE listings SET {', '.join(assignments)} WHERE id = :id AND is_deleted = 0",
        params,
    )


def mark_listing_deleted(conn: Connection, listing_id: str, updated_at: datetime) -> bool:
    """Set the soft-delete flag. Returns False when no active row matched."""
    result = execute_query(
        conn,
        "UPDATE listings SET is_deleted = 1, updated_at = :updated_at WHERE id = :id AND is_deleted = 0",
        {"id": listing_id, "updated_at": _iso(updated_at)},
    )
    return result.rowcount > 0


def query_listings(
    conn: Connection,
    filters: ListingFilters,
    *,
    offset: int,
    limit: int,
) -> Tuple[List[Listing], int]:
    """
    Return one page of active listings, newest first, and the total match count.
    """
    where_sql, params = build_listing_where(filters)

    count_row = fetch_one(
        conn,
        f"SELECT COUNT(*) AS total FROM listings l WHERE {where_sql}",
        params,
    )
    total = int(count_row["total"]) if count_row else 0

    page_params = dict(params, limit=limit, offset=offset)
    rows = fetch_all(
        conn,
        _LISTING_SELECT
        + f" WHERE {where_sql} ORDER BY l.created_at DESC, l.id DESC LIMIT :limit OFFSET :offset",
        page_params,
    )
    return [_row_to_listing(row) for row in rows], total
