# =============================================================================
# core/services/listing_service.py - Listing Business Logic
# =============================================================================
# Handles listing CRUD operations against the "listings" collection.
# Separates HTTP concerns from database logic.
# =============================================================================

import logging
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.exceptions import DatabaseError, InvalidListingIdError, ListingNotFoundError
from core.models.listing import ListingCreate, ListingUpdate
from lib.utils import to_object_id

logger = logging.getLogger(__name__)


LISTINGS_COLLECTION = "listings"


def _serialize(document: dict[str, Any]) -> dict[str, Any]:
    """Turn a stored document into an API dict (ObjectId -> "id")."""
    listing = {key: value for key, value in document.items() if key != "_id"}
    listing["id"] = str(document["_id"])
    return listing


class ListingService:
    """
    Service for listing management operations.

    Bound to one collection so tests can hand in an in-memory one.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    def _object_id(self, listing_id: str) -> ObjectId:
        object_id = to_object_id(listing_id)
        if object_id is None:
            raise InvalidListingIdError(listing_id)
        return object_id

    def list_listings(self) -> list[dict[str, Any]]:
        """
        Fetch all listings, oldest first.

        Returns:
            List of listing dicts
        """
        try:
            documents = self.collection.find({}).sort("_id", 1)
            return [_serialize(doc) for doc in documents]
        except PyMongoError as e:
            logger.error(f"Failed to list listings: {e}")
            raise DatabaseError("list listings", str(e)) from e

    def get_listing(self, listing_id: str) -> dict[str, Any]:
        """
        Get a listing by ID.

        Raises:
            InvalidListingIdError: If the id is not a valid ObjectId
            ListingNotFoundError: If no listing has this id
        """
        object_id = self._object_id(listing_id)

        try:
            document = self.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Failed to fetch listing {listing_id}: {e}")
            raise DatabaseError("fetch the listing", str(e)) from e

        if document is None:
            raise ListingNotFoundError(listing_id)
        return _serialize(document)

    def create_listing(self, listing: ListingCreate) -> dict[str, Any]:
        """
        Create a new listing.

        Returns:
            Created listing dict including its new id
        """
        document = listing.model_dump()

        try:
            result = self.collection.insert_one(document)
        except PyMongoError as e:
            logger.error(f"Failed to create listing: {e}")
            raise DatabaseError("create the listing", str(e)) from e

        document["_id"] = result.inserted_id
        logger.info(f"Created listing: {result.inserted_id}")
        return _serialize(document)

    def update_listing(self, listing_id: str, changes: ListingUpdate) -> dict[str, Any]:
        """
        Apply the fields the client sent to an existing listing.

        Returns:
            The listing after the update

        Raises:
            InvalidListingIdError: If the id is not a valid ObjectId
            ListingNotFoundError: If no listing has this id
        """
        object_id = self._object_id(listing_id)
        update_data = changes.model_dump(exclude_unset=True)

        if not update_data:
            return self.get_listing(listing_id)  # Nothing to update

        try:
            document = self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to update listing {listing_id}: {e}")
            raise DatabaseError("update the listing", str(e)) from e

        if document is None:
            raise ListingNotFoundError(listing_id)

        logger.info(f"Updated listing: {listing_id} fields={sorted(update_data)}")
        return _serialize(document)

    def delete_listing(self, listing_id: str) -> dict[str, Any]:
        """
        Delete a listing.

        Returns:
            The deleted listing

        Raises:
            InvalidListingIdError: If the id is not a valid ObjectId
            ListingNotFoundError: If no listing has this id
        """
        object_id = self._object_id(listing_id)

        try:
            document = self.collection.find_one_and_delete({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete listing {listing_id}: {e}")
            raise DatabaseError("delete the listing", str(e)) from e

        if document is None:
            raise ListingNotFoundError(listing_id)

        logger.info(f"Deleted listing: {listing_id}")
        return _serialize(document)
