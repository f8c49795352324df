# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .listing_service import LISTINGS_COLLECTION, ListingService

__all__ = [
    "LISTINGS_COLLECTION",
    "ListingService",
]
