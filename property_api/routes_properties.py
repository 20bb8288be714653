"""
property_api/routes_properties.py

Property listing endpoints.

Security guarantees:
- Reads (list, get) are public; a bearer token is accepted but optional
- Create/update/delete require role "agent"; update/delete also require ownership
- Admin delete requires role "admin" and skips the ownership check
- Owner id always comes from the verified token, never from the request
- Input validation via Pydantic schemas
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from property_api import listings
from property_api.auth_context import AuthContext, optional_auth_context, require_auth_context
from property_api.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from property_api.models import ListingStatus
from property_api.rbac import ADMIN_ONLY, AGENT_ONLY
from property_api.schemas import (
    MessageResponse,
    PaginationResponse,
    PropertyCreateRequest,
    PropertyDetailResponse,
    PropertyListResponse,
    PropertyMessageResponse,
    PropertyResponse,
    PropertyUpdateRequest,
)
from property_api.store import ListingFilters

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/properties",
    tags=["properties"],
)


@router.get("", response_model=PropertyListResponse)
def list_properties(
    page: int = Query(1, ge=1, description="Page number (default 1)"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT, description="Page size"),
    status_filter: Optional[ListingStatus] = Query(None, alias="status", description="available or sold"),
    min_price: Optional[float] = Query(None, alias="minPrice", allow_inf_nan=False, description="Inclusive lower price bound"),
    max_price: Optional[float] = Query(None, alias="maxPrice", allow_inf_nan=False, description="Inclusive upper price bound"),
    search: Optional[str] = Query(None, max_length=200, description="Substring of title or location"),
    viewer: Optional[AuthContext] = Depends(optional_auth_context),
) -> PropertyListResponse:
    """
    List active listings, newest first.

    All filters are ANDed; ``search`` matches title OR location, ignoring case.
    """
    filters = ListingFilters(
        status=status_filter.value if status_filter else None,
        min_price=min_price,
        max_price=max_price,
        search=search or None,
    )
    results, pagination = listings.list_listings(filters, page=page, limit=limit)

    logger.debug(
        "[PROPERTIES] list viewer=%s, results=%s",
        viewer.account_id if viewer else "anonymous",
        len(results),
    )

    return PropertyListResponse(
        properties=[PropertyResponse.from_listing(listing) for listing in results],
        pagination=PaginationResponse(**pagination),
    )


@router.post("", response_model=PropertyMessageResponse, status_code=status.HTTP_201_CREATED, dependencies=AGENT_ONLY)
def create_property(
    request: PropertyCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
) -> PropertyMessageResponse:
    """
    Create a listing owned by the calling agent.

    Raises:
        AuthenticationError(401): No or invalid token
        PermissionDeniedError(403): Caller is not an agent
        ValidationError(400): title, price or location missing
    """
    listing = listings.create(
        ctx.account_id,
        title=request.title,
        price=request.price,
        location=request.location,
        description=request.description,
        status=request.status.value if request.status else None,
    )
    return PropertyMessageResponse(
        message="Property created successfully",
        property=PropertyResponse.from_listing(listing),
    )


@router.delete("/admin/{property_id}", response_model=MessageResponse, dependencies=ADMIN_ONLY)
def admin_delete_property(
    property_id: str = Path(..., min_length=1, max_length=64),
) -> MessageResponse:
    """Soft delete any listing (admin only)."""
    listings.admin_delete(property_id)
    return MessageResponse(message="Property deleted successfully by admin")


@router.get("/{property_id}", response_model=PropertyDetailResponse)
def get_property(
    property_id: str = Path(..., min_length=1, max_length=64),
    viewer: Optional[AuthContext] = Depends(optional_auth_context),
) -> PropertyDetailResponse:
    """Fetch one active listing; 404 once it has been deleted."""
    listing = listings.get(property_id)
    logger.debug(
        "[PROPERTIES] get listing_id=%s, viewer=%s",
        property_id,
        viewer.account_id if viewer else "anonymous",
    )
    return PropertyDetailResponse(property=PropertyResponse.from_listing(listing))


@router.put("/{property_id}", response_model=PropertyMessageResponse, dependencies=AGENT_ONLY)
def update_property(
    request: PropertyUpdateRequest,
    property_id: str = Path(..., min_length=1, max_length=64),
    ctx: AuthContext = Depends(require_auth_context),
) -> PropertyMessageResponse:
    """
    Update the supplied fields of the caller's own listing.

    Raises:
        NotFoundError(404): Missing or deleted listing
        PermissionDeniedError(403): Caller is not the owner
    """
    listing = listings.update(
        ctx.account_id,
        property_id,
        request.model_dump(exclude_unset=True, mode="json"),
    )
    return PropertyMessageResponse(
        message="Property updated successfully",
        property=PropertyResponse.from_listing(listing),
    )


@router.delete("/{property_id}", response_model=MessageResponse, dependencies=AGENT_ONLY)
def delete_property(
    property_id: str = Path(..., min_length=1, max_length=64),
    ctx: AuthContext = Depends(require_auth_context),
) -> MessageResponse:
    """Soft delete the caller's own listing."""
    listings.delete(ctx.account_id, property_id)
    return MessageResponse(message="Property deleted successfully")
