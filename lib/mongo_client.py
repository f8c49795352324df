# =============================================================================
# lib/mongo_client.py - MongoDB Client Wrapper
# =============================================================================
# This module owns the single pymongo client used by the application.
# The client is created lazily from the validated DATABASE_URL and shared
# by every request (pymongo clients are thread-safe and pool connections).
#
# Usage:
#   connector = MongoConnector.from_settings(settings)
#   listings = connector.get_collection("listings")
#   connector.ping()   # at startup
#   connector.close()  # at shutdown
# =============================================================================

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from pymongo import MongoClient
from pymongo.errors import PyMongoError

if TYPE_CHECKING:
    from pymongo.collection import Collection
    from pymongo.database import Database

    from app.config import Settings

# Set up logging for this module
logger = logging.getLogger(__name__)


MONGO_SCHEME = "mongodb://"
DEFAULT_DATABASE = "wanderlust"
SERVER_SELECTION_TIMEOUT_MS = 5000


class MongoClientError(Exception):
    """
    Error while setting up or using the MongoDB client.

    Carries a code and an actionable suggestion, like the API exceptions.
    """

    def __init__(
        self,
        message: str,
        code: str = "MONGO_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class UnsupportedDatabaseError(MongoClientError):
    """Raised when DATABASE_URL does not point at MongoDB."""

    def __init__(self, scheme: str):
        super().__init__(
            message=f"Listings require a MongoDB database, got '{scheme}' URL",
            code="UNSUPPORTED_DATABASE",
            suggestion="Set DATABASE_URL to a mongodb:// connection string",
            details={"scheme": scheme},
        )


class MongoConnector:
    """
    Lazily-connected MongoDB client bound to one DATABASE_URL.

    One connector is created per application by create_app() and stored on
    app.state; route handlers reach it through dependencies.

    Example:
        connector = MongoConnector("mongodb://localhost:27017/wanderlust")
        doc = connector.get_collection("listings").find_one({})
    """

    def __init__(
        self,
        database_url: str,
        client_factory: Callable[..., MongoClient] = MongoClient,
    ):
        self.database_url = database_url
        self._client_factory = client_factory
        self._client: MongoClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> MongoConnector:
        """Build a connector for the validated DATABASE_URL."""
        return cls(settings.DATABASE_URL)

    @property
    def is_supported(self) -> bool:
        """True when DATABASE_URL can back the document store."""
        return self.database_url.startswith(MONGO_SCHEME)

    def get_client(self) -> MongoClient:
        """
        Get or create the MongoDB client.

        Raises:
            UnsupportedDatabaseError: If DATABASE_URL is not a mongodb:// URL
        """
        if not self.is_supported:
            scheme = self.database_url.split("://", 1)[0]
            raise UnsupportedDatabaseError(scheme)

        if self._client is None:
            self._client = self._client_factory(
                self.database_url,
                serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
            )
            logger.info("MongoDB client initialized")
        return self._client

    def get_database(self) -> Database:
        """The database named in the URL, or 'wanderlust' if none is given."""
        return self.get_client().get_default_database(default=DEFAULT_DATABASE)

    def get_collection(self, name: str) -> Collection:
        return self.get_database()[name]

    def ping(self) -> bool:
        """
        Check connectivity.

        Failures are logged, not raised: the API keeps serving and the
        readiness endpoint reports the database as degraded.

        Returns:
            True if the server answered the ping
        """
        try:
            self.get_client().admin.command("ping")
        except UnsupportedDatabaseError as e:
            logger.warning(str(e))
            return False
        except PyMongoError as e:
            logger.error(f"Error connecting to MongoDB: {e}")
            return False

        logger.info("Connected to MongoDB")
        return True

    def close(self) -> None:
        """Close the client if it was ever opened."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MongoDB client closed")
