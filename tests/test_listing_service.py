# =============================================================================
# tests/test_listing_service.py - Listing Service Tests
# =============================================================================
# CRUD tests against an in-memory MongoDB (mongomock), plus error mapping
# for driver failures using a mocked collection.
#
# Run with: poetry run pytest tests/test_listing_service.py -v
# =============================================================================

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from app.exceptions import DatabaseError, InvalidListingIdError, ListingNotFoundError
from core.models import DEFAULT_LISTING_IMAGE, ListingCreate, ListingUpdate
from core.services.listing_service import ListingService


MISSING_ID = str(ObjectId())


class TestCreateAndRead:
    """Tests for create_listing, get_listing and list_listings."""

    def test_create_returns_listing_with_id(self, listing_service, sample_listing_data):
        listing = listing_service.create_listing(ListingCreate(**sample_listing_data))

        assert ObjectId.is_valid(listing["id"])
        assert "_id" not in listing
        assert listing["title"] == sample_listing_data["title"]

    def test_create_persists_document(self, listing_service, sample_listing_data):
        created = listing_service.create_listing(ListingCreate(**sample_listing_data))

        stored = listing_service.collection.find_one({"_id": ObjectId(created["id"])})

        assert stored["location"] == "Malibu"

    def test_create_without_image_stores_placeholder(self, listing_service):
        listing = listing_service.create_listing(ListingCreate(title="Cabin"))

        assert listing["image"] == DEFAULT_LISTING_IMAGE

    def test_get_listing(self, listing_service, sample_listing_data):
        created = listing_service.create_listing(ListingCreate(**sample_listing_data))

        fetched = listing_service.get_listing(created["id"])

        assert fetched == created

    def test_get_missing_listing(self, listing_service):
        with pytest.raises(ListingNotFoundError) as excinfo:
            listing_service.get_listing(MISSING_ID)

        assert excinfo.value.status_code == 404

    def test_get_with_invalid_id(self, listing_service):
        with pytest.raises(InvalidListingIdError) as excinfo:
            listing_service.get_listing("not-an-object-id")

        assert excinfo.value.status_code == 400

    def test_list_is_empty_initially(self, listing_service):
        assert listing_service.list_listings() == []

    def test_list_returns_oldest_first(self, listing_service):
        for title in ("First", "Second", "Third"):
            listing_service.create_listing(ListingCreate(title=title))

        titles = [listing["title"] for listing in listing_service.list_listings()]

        assert titles == ["First", "Second", "Third"]


class TestUpdate:
    """Tests for update_listing."""

    def test_update_changes_only_sent_fields(self, listing_service, sample_listing_data):
        created = listing_service.create_listing(ListingCreate(**sample_listing_data))

        updated = listing_service.update_listing(created["id"], ListingUpdate(price=900))

        assert updated["price"] == 900
        assert updated["title"] == sample_listing_data["title"]
        assert updated["description"] == sample_listing_data["description"]

    def test_update_returns_stored_state(self, listing_service):
        created = listing_service.create_listing(ListingCreate(title="Cabin"))

        listing_service.update_listing(created["id"], ListingUpdate(title="Lake Cabin"))

        assert listing_service.get_listing(created["id"])["title"] == "Lake Cabin"

    def test_empty_update_is_a_no_op(self, listing_service):
        created = listing_service.create_listing(ListingCreate(title="Cabin"))

        assert listing_service.update_listing(created["id"], ListingUpdate()) == created

    def test_update_missing_listing(self, listing_service):
        with pytest.raises(ListingNotFoundError):
            listing_service.update_listing(MISSING_ID, ListingUpdate(price=1))

    def test_update_with_invalid_id(self, listing_service):
        with pytest.raises(InvalidListingIdError):
            listing_service.update_listing("123", ListingUpdate(price=1))


class TestDelete:
    """Tests for delete_listing."""

    def test_delete_returns_deleted_listing(self, listing_service):
        created = listing_service.create_listing(ListingCreate(title="Cabin"))

        deleted = listing_service.delete_listing(created["id"])

        assert deleted == created
        assert listing_service.list_listings() == []

    def test_delete_twice(self, listing_service):
        created = listing_service.create_listing(ListingCreate(title="Cabin"))
        listing_service.delete_listing(created["id"])

        with pytest.raises(ListingNotFoundError):
            listing_service.delete_listing(created["id"])


class TestDatabaseFailures:
    """Driver errors are wrapped in DatabaseError."""

    @pytest.fixture
    def failing_service(self):
        collection = MagicMock()
        error = ServerSelectionTimeoutError("no servers available")
        collection.find.side_effect = error
        collection.find_one.side_effect = error
        collection.insert_one.side_effect = error
        collection.find_one_and_update.side_effect = error
        collection.find_one_and_delete.side_effect = error
        return ListingService(collection)

    def test_list_failure(self, failing_service):
        with pytest.raises(DatabaseError) as excinfo:
            failing_service.list_listings()

        assert excinfo.value.status_code == 503
        assert excinfo.value.details["operation"] == "list listings"

    def test_create_failure(self, failing_service):
        with pytest.raises(DatabaseError):
            failing_service.create_listing(ListingCreate(title="Cabin"))

    def test_get_failure(self, failing_service):
        with pytest.raises(DatabaseError):
            failing_service.get_listing(MISSING_ID)

    def test_update_failure(self, failing_service):
        with pytest.raises(DatabaseError):
            failing_service.update_listing(MISSING_ID, ListingUpdate(price=1))

    def test_delete_failure(self, failing_service):
        with pytest.raises(DatabaseError):
            failing_service.delete_listing(MISSING_ID)
