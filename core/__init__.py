# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the listing domain:
# - models/: Pydantic schemas for request/response validation
# - services/: Listing CRUD against the document database
#
# Code in this package should NOT import from FastAPI routers.
# This keeps the logic testable and reusable.
# =============================================================================
