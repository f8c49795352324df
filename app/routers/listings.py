# =============================================================================
# app/routers/listings.py - Listing CRUD Endpoints
# =============================================================================
# Index, show, create, update and delete for listings.
# Handlers stay thin: validation is done by the request models and all
# database work is delegated to ListingService.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import ListingServiceDep
from core.models.listing import (
    ListingCreate,
    ListingList,
    ListingResponse,
    ListingUpdate,
)

router = APIRouter()

ListingId = Annotated[str, Path(description="Listing id (ObjectId hex)")]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=ListingList)
def list_listings(service: ListingServiceDep):
    """
    List all listings.

    Returns every listing, oldest first.
    """
    listings = service.list_listings()
    return ListingList(
        listings=[ListingResponse(**listing) for listing in listings],
        total=len(listings),
    )


@router.get("/{listing_id}", response_model=ListingResponse)
def get_listing(listing_id: ListingId, service: ListingServiceDep):
    """
    Get one listing.

    Returns 404 if the listing doesn't exist.
    """
    return ListingResponse(**service.get_listing(listing_id))


@router.post("", response_model=ListingResponse, status_code=201)
def create_listing(request: ListingCreate, service: ListingServiceDep):
    """
    Create a listing.

    Blank or missing images are replaced with a placeholder.
    """
    return ListingResponse(**service.create_listing(request))


@router.put("/{listing_id}", response_model=ListingResponse)
def update_listing(
    listing_id: ListingId,
    request: ListingUpdate,
    service: ListingServiceDep,
):
    """
    Update a listing.

    Only the fields present in the request body are changed.
    Returns the listing as stored after the update.
    """
    return ListingResponse(**service.update_listing(listing_id, request))


@router.delete("/{listing_id}", response_model=ListingResponse)
def delete_listing(listing_id: ListingId, service: ListingServiceDep):
    """
    Delete a listing.

    Returns the deleted listing.
    """
    return ListingResponse(**service.delete_listing(listing_id))
