# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Wanderlust API:
# - test_config.py: Stage resolution, .env overlays and settings validation
# - test_models.py: Listing schema validation
# - test_listing_service.py: Listing CRUD against an in-memory MongoDB
# - test_mongo_client.py: Database connector behaviour
# - test_routes.py: HTTP endpoints through FastAPI's TestClient
# - test_utils.py: Shared helpers
#
# Run tests with: poetry run pytest
# =============================================================================
