# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures shared by all tests.
#
# Key features:
# - Validated settings built from an explicit environment snapshot
#   (tests never read or modify os.environ)
# - An in-memory MongoDB (mongomock) standing in for the real database
# - A TestClient wired through create_app()
# =============================================================================

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.config import validate_environment
from app.main import create_app
from core.services.listing_service import LISTINGS_COLLECTION, ListingService
from lib.mongo_client import MongoConnector


TEST_DATABASE_URL = "mongodb://localhost:27017/wanderlust_test"


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def base_environ():
    """Smallest environment that validates."""
    return {"DATABASE_URL": TEST_DATABASE_URL}


@pytest.fixture
def settings(base_environ):
    """Validated settings for the test stage."""
    result = validate_environment({**base_environ, "APP_STAGE": "test", "NODE_ENV": "test"})
    assert result.ok, result.violations
    return result.config


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def mongo():
    """MongoConnector backed by mongomock, emptied after each test."""
    connector = MongoConnector(TEST_DATABASE_URL, client_factory=mongomock.MongoClient)
    connector.get_client().drop_database("wanderlust_test")
    yield connector
    connector.get_client().drop_database("wanderlust_test")
    connector.close()


@pytest.fixture
def listing_service(mongo):
    """ListingService bound to the in-memory listings collection."""
    return ListingService(mongo.get_collection(LISTINGS_COLLECTION))


@pytest.fixture
def sample_listing_data():
    """Sample listing payload."""
    return {
        "title": "Cozy Beachfront Cottage",
        "description": "Wake up to the sound of waves in this charming cottage.",
        "image": "https://images.example.com/cottage.jpg",
        "price": 1500,
        "location": "Malibu",
        "country": "United States",
    }


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client(settings, mongo):
    """TestClient for an app using the in-memory database."""
    return TestClient(create_app(settings, mongo=mongo))
