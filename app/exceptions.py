# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors carry a machine-readable code and, where possible, a suggestion
# telling the caller how to fix the request.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lib.mongo_client import MongoClientError

logger = logging.getLogger(__name__)


class WanderlustException(Exception):
    """
    Base exception for the Wanderlust API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "WANDERLUST_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Listing Exceptions
# =============================================================================

class ListingNotFoundError(WanderlustException):
    """Raised when a listing ID doesn't exist."""

    def __init__(self, listing_id: str):
        super().__init__(
            message=f"Listing not found: {listing_id}",
            code="LISTING_NOT_FOUND",
            status_code=404,
            suggestion="Check that the listing id is correct and the listing hasn't been deleted",
            details={"listing_id": listing_id}
        )


class InvalidListingIdError(WanderlustException):
    """Raised when a listing ID is not a valid ObjectId."""

    def __init__(self, listing_id: str):
        super().__init__(
            message=f"Invalid listing id: {listing_id}",
            code="INVALID_LISTING_ID",
            status_code=400,
            suggestion="Listing ids are 24-character hex strings returned by POST /listings",
            details={"listing_id": listing_id}
        )


# =============================================================================
# Database Exceptions
# =============================================================================

class DatabaseError(WanderlustException):
    """Raised when the database rejects or fails an operation."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Database error while trying to {operation}",
            code="DATABASE_ERROR",
            status_code=503,
            suggestion="Try again later or check GET /health/ready",
            details={"operation": operation, "error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def wanderlust_exception_handler(
    request: Request,
    exc: WanderlustException
) -> JSONResponse:
    """
    Convert WanderlustException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def not_found_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle HTTP errors raised by routing.

    Unmatched URLs get a structured 404; other HTTP errors keep
    FastAPI's default response.
    """
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)

    logger.info(f"No route matched for URL: {request.url.path}")
    return JSONResponse(
        status_code=404,
        content={
            "detail": "Route not found!",
            "code": "ROUTE_NOT_FOUND",
        }
    )


async def unexpected_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


async def database_client_exception_handler(
    request: Request,
    exc: MongoClientError
) -> JSONResponse:
    """Report database setup problems (e.g. a non-MongoDB DATABASE_URL)."""
    logger.error(str(exc))
    content = {
        "detail": exc.message,
        "code": exc.code,
    }
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    return JSONResponse(status_code=503, content=content)
