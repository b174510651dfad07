"""
Property repository for managing listings with filtering and moderation queries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, delete, func, desc
from homedirect.repositories.base import BaseRepository
from homedirect.models.property import Property
from homedirect.models.favorite import Favorite
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)

# Select value meaning "no constraint" for the type filters
ANY_TYPE = "all"

LIKE_ESCAPE = "\\"


def _contains(text: str) -> str:
    """LIKE pattern matching ``text`` literally anywhere in the value."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


class PropertySearchFilters:
    """Data class for listing search filters."""

    def __init__(
        self,
        listing_type: Optional[str] = None,
        property_type: Optional[str] = None,
        region: Optional[str] = None,
        city: Optional[str] = None,
        district: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        rooms: Optional[int] = None,
        min_area: Optional[int] = None,
        max_area: Optional[int] = None,
        approved: Optional[bool] = True
    ):
        self.listing_type = listing_type
        self.property_type = property_type
        self.region = region
        self.city = city
        self.district = district
        self.min_price = min_price
        self.max_price = max_price
        self.rooms = rooms
        self.min_area = min_area
        self.max_area = max_area
        self.approved = approved


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for listing management with filtering capabilities.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a new listing with validation.

        Raises:
            ValueError: If validation fails
        """
        property_obj = Property(**property_data)
        property_obj.validate_all()

        created_property = await self.create(property_data)
        logger.info(f"Created property: {created_property.title} (ID: {created_property.id})")
        return created_property

    async def search_properties(self, filters: PropertySearchFilters) -> List[Property]:
        """
        Search listings, newest first.

        Args:
            filters: PropertySearchFilters instance with search criteria

        Returns:
            List of matching listings
        """
        try:
            query = select(Property)

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(desc(Property.created_at), desc(Property.id))

            result = await self.db.execute(query)
            properties = list(result.scalars().all())

            logger.debug(f"Property search returned {len(properties)} results")
            return properties
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.
        """
        conditions = []

        # Moderation gate
        if filters.approved is not None:
            conditions.append(Property.approved == filters.approved)

        if filters.listing_type and filters.listing_type != ANY_TYPE:
            conditions.append(Property.listing_type == filters.listing_type)

        if filters.property_type and filters.property_type != ANY_TYPE:
            conditions.append(Property.property_type == filters.property_type)

        # Location filters (case-insensitive partial match)
        if filters.region:
            conditions.append(Property.region.ilike(_contains(filters.region), escape=LIKE_ESCAPE))
        if filters.city:
            conditions.append(Property.city.ilike(_contains(filters.city), escape=LIKE_ESCAPE))
        if filters.district:
            conditions.append(Property.district.ilike(_contains(filters.district), escape=LIKE_ESCAPE))

        # Price range
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        # Area range
        if filters.min_area is not None:
            conditions.append(Property.area >= filters.min_area)
        if filters.max_area is not None:
            conditions.append(Property.area <= filters.max_area)

        if filters.rooms is not None:
            conditions.append(Property.rooms == filters.rooms)

        return conditions

    async def get_properties_by_owner(self, owner_id: int) -> List[Property]:
        """Get every listing submitted by a user, regardless of approval."""
        result = await self.db.execute(
            select(Property)
            .where(Property.owner_id == owner_id)
            .order_by(desc(Property.created_at), desc(Property.id))
        )
        return list(result.scalars().all())

    async def get_pending_properties(self) -> List[Property]:
        """Get listings awaiting moderation, oldest first."""
        result = await self.db.execute(
            select(Property)
            .where(Property.approved == False)  # noqa: E712
            .order_by(Property.created_at, Property.id)
        )
        return list(result.scalars().all())

    async def set_approved(self, property_id: int, approved: bool) -> Optional[Property]:
        """Update the moderation flag."""
        # update() drops None values but keeps False
        updated = await self.update(property_id, {"approved": approved})
        if updated:
            status = "approved" if approved else "returned to moderation"
            logger.info(f"Property {property_id} {status}")
        return updated

    async def delete_property(self, property_id: int) -> bool:
        """
        Delete a listing together with the favorites pointing at it.
        """
        try:
            await self.db.execute(delete(Favorite).where(Favorite.property_id == property_id))
            deleted = await self.delete(property_id)
            if deleted:
                logger.info(f"Deleted property {property_id} with its favorites")
            return deleted
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise

    async def count_pending(self) -> int:
        result = await self.db.execute(
            select(func.count(Property.id)).where(Property.approved == False)  # noqa: E712
        )
        return result.scalar()
