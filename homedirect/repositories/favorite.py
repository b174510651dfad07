"""
Favorite repository for the user-to-listing join table.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, desc
from homedirect.models.favorite import Favorite
from homedirect.models.property import Property
from typing import List
import logging

logger = logging.getLogger(__name__)


class FavoriteRepository:
    """
    Repository for favorites keyed by (user_id, property_id).
    Adding and removing are both idempotent.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_favorites(self, user_id: int) -> List[Property]:
        """Get the approved listings a user saved, most recently listed first."""
        result = await self.db.execute(
            select(Property)
            .join(Favorite, Favorite.property_id == Property.id)
            .where(Favorite.user_id == user_id, Property.approved == True)  # noqa: E712
            .order_by(desc(Property.created_at), desc(Property.id))
        )
        return list(result.scalars().all())

    async def is_favorite(self, user_id: int, property_id: int) -> bool:
        favorite = await self.db.get(Favorite, (user_id, property_id))
        return favorite is not None

    async def add(self, user_id: int, property_id: int) -> None:
        try:
            if await self.is_favorite(user_id, property_id):
                return
            self.db.add(Favorite(user_id=user_id, property_id=property_id))
            await self.db.commit()
            logger.debug(f"User {user_id} saved property {property_id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to add favorite ({user_id}, {property_id}): {e}")
            raise

    async def remove(self, user_id: int, property_id: int) -> None:
        try:
            await self.db.execute(
                delete(Favorite).where(
                    Favorite.user_id == user_id,
                    Favorite.property_id == property_id
                )
            )
            await self.db.commit()
            logger.debug(f"User {user_id} removed property {property_id} from favorites")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to remove favorite ({user_id}, {property_id}): {e}")
            raise
