"""
Pydantic schemas for property requests and responses.
Handles listing CRUD payloads and the public search filters.
"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime
from homedirect.models.property import PropertyType, ListingType
from homedirect.repositories.property import PropertySearchFilters
from homedirect.schemas.base import CamelModel


def _clean_text(v: Optional[str]) -> Optional[str]:
    if v is not None:
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()
    return v


class PropertyBase(CamelModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Listing title",
        examples=["Bright 2-room apartment near the park"]
    )

    description: str = Field(
        ...,
        min_length=10,
        max_length=5000,
        description="Detailed listing description",
        examples=["Renovated apartment on the 5th floor, furnished kitchen, quiet courtyard."]
    )

    price: int = Field(
        ...,
        gt=0,
        description="Asking price, or monthly rent for rentals",
        examples=[7500000]
    )

    property_type: PropertyType = Field(..., examples=["apartment"])
    listing_type: ListingType = Field(..., examples=["sale"])

    region: str = Field(..., min_length=1, max_length=100, examples=["Moscow Oblast"])
    city: str = Field(..., min_length=1, max_length=100, examples=["Moscow"])
    district: str = Field(..., min_length=1, max_length=100, examples=["Khamovniki"])
    address: str = Field(..., min_length=1, max_length=255, examples=["Ostozhenka 12"])

    area: int = Field(..., gt=0, le=1000000, description="Area in square meters", examples=[54])
    rooms: int = Field(..., ge=0, le=100, description="Number of rooms", examples=[2])

    photos: List[str] = Field(
        default_factory=list,
        description="Ordered photo references"
    )

    @field_validator('title', 'description', 'region', 'city', 'district', 'address')
    @classmethod
    def validate_text(cls, v):
        """Validate and clean text fields."""
        return _clean_text(v)


class PropertyCreate(PropertyBase):
    """Schema for creating a new listing."""


class PropertyUpdate(CamelModel):
    """Schema for updating an existing listing. Omitted fields are left unchanged."""

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=10, max_length=5000)
    price: Optional[int] = Field(None, gt=0)
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    region: Optional[str] = Field(None, min_length=1, max_length=100)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    district: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    area: Optional[int] = Field(None, gt=0, le=1000000)
    rooms: Optional[int] = Field(None, ge=0, le=100)
    photos: Optional[List[str]] = None

    @field_validator('title', 'description', 'region', 'city', 'district', 'address')
    @classmethod
    def validate_text(cls, v):
        return _clean_text(v)


class PropertyResponse(PropertyBase):
    """Listing as returned by the API."""

    id: int = Field(..., examples=[1])
    owner_id: int = Field(..., description="ID of the user who submitted the listing")
    approved: bool = Field(False, description="Whether an administrator approved the listing")
    created_at: datetime

    # Stored values are plain strings
    property_type: str
    listing_type: str


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Parse a numeric filter; empty or non-numeric input means no constraint."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return None


def _parse_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class PropertyFilterParams(CamelModel):
    """
    Raw listing filters as they arrive in the query string.

    Every value is an optional string; `area` is a minimum area and
    `areaMin`/`areaMax` bound it explicitly.
    """

    listing_type: Optional[str] = None
    property_type: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    price_min: Optional[str] = None
    price_max: Optional[str] = None
    rooms: Optional[str] = None
    area: Optional[str] = None
    area_min: Optional[str] = None
    area_max: Optional[str] = None

    def to_search_filters(self) -> PropertySearchFilters:
        """Convert to repository filters restricted to approved listings."""
        min_area = _parse_int(self.area_min)
        area = _parse_int(self.area)
        if area is not None:
            min_area = area if min_area is None else max(min_area, area)

        return PropertySearchFilters(
            listing_type=_parse_text(self.listing_type),
            property_type=_parse_text(self.property_type),
            region=_parse_text(self.region),
            city=_parse_text(self.city),
            district=_parse_text(self.district),
            min_price=_parse_int(self.price_min),
            max_price=_parse_int(self.price_max),
            rooms=_parse_int(self.rooms),
            min_area=min_area,
            max_area=_parse_int(self.area_max),
            approved=True
        )
