# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - listing.py: Listing CRUD schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

from .listing import (
    DEFAULT_LISTING_IMAGE,
    ListingCreate,
    ListingList,
    ListingResponse,
    ListingUpdate,
)

__all__ = [
    "DEFAULT_LISTING_IMAGE",
    "ListingCreate",
    "ListingList",
    "ListingResponse",
    "ListingUpdate",
]
