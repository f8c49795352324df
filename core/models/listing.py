# =============================================================================
# core/models/listing.py - Listing Schemas
# =============================================================================
# These models define the API contract for listing operations:
# - ListingCreate: Input for creating a listing
# - ListingUpdate: Partial input for editing a listing
# - ListingResponse: Output when returning a listing to clients
# - ListingList: Output of the index endpoint
#
# A listing is one property offered for rent, stored as a document in the
# "listings" collection.
# =============================================================================

from pydantic import BaseModel, Field, field_validator


# Shown when a listing is saved without an image
DEFAULT_LISTING_IMAGE = (
    "https://images.unsplash.com/photo-1625505826533-5c80aca7d157"
    "?auto=format&fit=crop&w=800&q=60"
)


class ListingBase(BaseModel):
    """Fields shared by every listing schema."""

    description: str | None = Field(
        default=None,
        max_length=2000,
        description="Free-text description of the property"
    )

    image: str | None = Field(
        default=None,
        description="Image URL (a placeholder is used when left blank)"
    )

    price: float | None = Field(
        default=None,
        ge=0,
        description="Nightly price"
    )

    location: str | None = Field(
        default=None,
        max_length=200,
        description="City or area"
    )

    country: str | None = Field(
        default=None,
        max_length=100,
        description="Country"
    )

    @field_validator("image")
    @classmethod
    def _blank_image_uses_placeholder(cls, value: str | None) -> str:
        if value is None or not value.strip():
            return DEFAULT_LISTING_IMAGE
        return value


class ListingCreate(ListingBase):
    """
    Schema for creating a listing.

    Example:
        {
            "title": "Cozy Beachfront Cottage",
            "description": "Wake up to the sound of waves",
            "price": 1500,
            "location": "Malibu",
            "country": "United States"
        }
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Listing title"
    )

    image: str | None = Field(
        default=DEFAULT_LISTING_IMAGE,
        description="Image URL (a placeholder is used when left blank)"
    )


class ListingUpdate(ListingBase):
    """
    Schema for editing a listing.

    Every field is optional; only the fields sent by the client are changed.

    Example:
        {
            "price": 1200
        }
    """

    title: str | None = Field(
        default=None,
        min_length=1,
        max_length=200,
        description="New listing title"
    )

    @field_validator("title")
    @classmethod
    def _title_not_null(cls, value: str | None) -> str:
        # Omit the field to keep the current title
        if value is None:
            raise ValueError("title cannot be null")
        return value


class ListingResponse(ListingBase):
    """
    Schema for returning a listing to clients.

    Example:
        {
            "id": "65a1f0c2e4b0a1b2c3d4e5f6",
            "title": "Cozy Beachfront Cottage",
            "description": "Wake up to the sound of waves",
            "image": "https://images.unsplash.com/...",
            "price": 1500.0,
            "location": "Malibu",
            "country": "United States"
        }
    """

    id: str = Field(
        ...,
        description="Unique listing identifier (ObjectId hex)"
    )

    title: str = Field(
        ...,
        description="Listing title"
    )


class ListingList(BaseModel):
    """
    Schema for listing all listings.

    Returned by GET /listings.
    """

    listings: list[ListingResponse] = Field(
        default_factory=list,
        description="All listings, oldest first"
    )

    total: int = Field(
        default=0,
        ge=0,
        description="Number of listings returned"
    )
