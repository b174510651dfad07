"""
Property model for sale and rent listings.
Handles listing data with location, pricing, photos and the moderation flag.
"""

from sqlalchemy import String, Text, Integer, Boolean, JSON, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from homedirect.database import TimestampedModel
import enum
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from homedirect.models.user import User


class PropertyType(str, enum.Enum):
    """Kind of real estate being offered."""
    APARTMENT = "apartment"
    HOUSE = "house"
    COMMERCIAL = "commercial"
    LAND = "land"


class ListingType(str, enum.Enum):
    """Whether the property is offered for sale or for rent."""
    SALE = "sale"
    RENT = "rent"


class Property(TimestampedModel):
    """
    Property listing owned by exactly one user.
    Only approved listings are visible in public search results.
    """

    __tablename__ = "properties"

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who submitted this listing"
    )

    # Basic listing information
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed listing description"
    )

    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Asking price or monthly rent in local currency"
    )

    property_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="apartment, house, commercial or land"
    )

    listing_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
        comment="sale or rent"
    )

    # Location
    region: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    district: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    # Specifications
    area: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Area in square meters"
    )

    rooms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Number of rooms"
    )

    photos: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered photo references"
    )

    # Moderation gate
    approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Whether an administrator approved the listing"
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="properties",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        """String representation of the listing."""
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"

    def validate_all(self) -> None:
        """
        Run all validation checks on the listing.

        Raises:
            ValueError: If any validation fails
        """
        if self.price is None or self.price <= 0:
            raise ValueError("Price must be greater than 0")
        if self.area is None or self.area <= 0:
            raise ValueError("Area must be greater than 0")
        if self.rooms is None or self.rooms < 0:
            raise ValueError("Number of rooms cannot be negative")
        if self.property_type not in {t.value for t in PropertyType}:
            raise ValueError(f"Unknown property type: {self.property_type}")
        if self.listing_type not in {t.value for t in ListingType}:
            raise ValueError(f"Unknown listing type: {self.listing_type}")

    def to_dict(self) -> dict:
        """Convert listing to dictionary."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "property_type": self.property_type,
            "listing_type": self.listing_type,
            "region": self.region,
            "city": self.city,
            "district": self.district,
            "address": self.address,
            "area": self.area,
            "rooms": self.rooms,
            "photos": list(self.photos or []),
            "approved": self.approved,
            "created_at": self.created_at,
        }


# Composite index for the public search (approved listings by type, newest first)
search_index = Index(
    'idx_properties_search',
    Property.approved,
    Property.listing_type,
    Property.property_type,
    Property.created_at.desc()
)

# Composite index for location and price filtering
location_price_index = Index(
    'idx_properties_location_price',
    Property.region,
    Property.city,
    Property.price
)

# Index for an owner's listings
owner_index = Index(
    'idx_properties_owner_created',
    Property.owner_id,
    Property.created_at.desc()
)
