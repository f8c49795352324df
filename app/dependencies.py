# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Settings and the database connector live on app.state (set by
# create_app), so every handler sees the instances built at startup.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from core.services.listing_service import LISTINGS_COLLECTION, ListingService
from lib.mongo_client import MongoConnector


def get_settings(request: Request) -> Settings:
    """Validated settings for this application."""
    return request.app.state.settings


def get_mongo(request: Request) -> MongoConnector:
    """MongoDB connector for this application."""
    return request.app.state.mongo


def get_listing_service(
    mongo: Annotated[MongoConnector, Depends(get_mongo)],
) -> ListingService:
    """Listing service bound to the listings collection."""
    return ListingService(mongo.get_collection(LISTINGS_COLLECTION))


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
MongoDep = Annotated[MongoConnector, Depends(get_mongo)]
ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
