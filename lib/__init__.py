# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - mongo_client.py: MongoDB client wrapper built from DATABASE_URL
# - utils.py: Shared utilities (ObjectId parsing, URL masking)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.mongo_client import MongoClientError, MongoConnector, UnsupportedDatabaseError
from lib.utils import mask_url_credentials, to_object_id

__all__ = [
    # MongoDB
    "MongoClientError",
    "MongoConnector",
    "UnsupportedDatabaseError",
    # Utils
    "mask_url_credentials",
    "to_object_id",
]
