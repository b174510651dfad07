"""
Favorite service for saving listings to a user's list.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from homedirect.repositories.favorite import FavoriteRepository
from homedirect.repositories.property import PropertyRepository
from homedirect.models.property import Property
from homedirect.models.user import User
from homedirect.utils.exceptions import PropertyNotFoundError
import logging

logger = logging.getLogger(__name__)


class FavoriteService:
    """Toggle and list favorites. Both toggles are idempotent."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.favorite_repo = FavoriteRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def get_favorites(self, current_user: User) -> List[Property]:
        """Get the user's favorite listings that are currently approved."""
        return await self.favorite_repo.get_user_favorites(current_user.id)

    async def add_favorite(self, property_id: int, current_user: User) -> None:
        """
        Save a listing to the user's favorites.

        Raises:
            PropertyNotFoundError: If the listing does not exist
        """
        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(property_id)

        await self.favorite_repo.add(current_user.id, property_id)
        logger.info(f"User {current_user.username} added property {property_id} to favorites")

    async def remove_favorite(self, property_id: int, current_user: User) -> None:
        await self.favorite_repo.remove(current_user.id, property_id)
        logger.info(f"User {current_user.username} removed property {property_id} from favorites")

    async def is_favorite(self, property_id: int, current_user: User) -> bool:
        return await self.favorite_repo.is_favorite(current_user.id, property_id)
