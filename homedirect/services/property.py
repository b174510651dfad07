"""
Property service for managing listings with ownership and moderation rules.
Handles CRUD operations, visibility of unapproved listings, search and approval.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from homedirect.repositories.property import PropertyRepository, PropertySearchFilters
from homedirect.models.property import Property
from homedirect.models.user import User
from homedirect.schemas.property import PropertyCreate, PropertyUpdate
from homedirect.utils.exceptions import (
    PropertyNotFoundError,
    PropertyNotApprovedError,
    EmailNotVerifiedError,
    ValidationError,
    InsufficientPermissionsError
)
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for listing management.
    New and owner-edited listings go back to moderation; only admins approve.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)

    async def create_property(self, property_data: PropertyCreate, current_user: User) -> Property:
        """
        Create a new listing owned by the current user, pending moderation.

        Args:
            property_data: Listing payload
            current_user: User submitting the listing

        Returns:
            Created listing

        Raises:
            EmailNotVerifiedError: If the user has not verified their email
            ValidationError: If the listing fails model validation
        """
        if not current_user.is_verified:
            raise EmailNotVerifiedError()

        create_data = property_data.model_dump(mode="json")
        create_data.update({
            "owner_id": current_user.id,
            "approved": False,
        })

        try:
            property_obj = await self.property_repo.create_property(create_data)
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(
            f"Property submitted by {current_user.username}: "
            f"{property_obj.title} (ID: {property_obj.id})"
        )
        return property_obj

    async def get_property(self, property_id: int, current_user: Optional[User] = None) -> Property:
        """
        Get a listing; unapproved ones are visible to their owner and admins only.

        Raises:
            PropertyNotFoundError: If the listing does not exist
            PropertyNotApprovedError: If the listing is pending and the caller may not see it
        """
        property_obj = await self._get_or_404(property_id)

        if not property_obj.approved:
            if current_user is None or not current_user.can_manage_property(property_obj.owner_id):
                raise PropertyNotApprovedError()

        return property_obj

    async def update_property(
        self,
        property_id: int,
        property_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Update a listing owned by the current user (or any listing, for admins).

        A change made by a non-admin sends the listing back to moderation.

        Raises:
            PropertyNotFoundError: If the listing does not exist
            InsufficientPermissionsError: If the user may not edit the listing
            ValidationError: If no fields were supplied
        """
        property_obj = await self._get_or_404(property_id)

        if not current_user.can_manage_property(property_obj.owner_id):
            raise InsufficientPermissionsError("update this property")

        update_data = property_data.model_dump(mode="json", exclude_unset=True)
        update_data = {k: v for k, v in update_data.items() if v is not None}
        if not update_data:
            raise ValidationError("No valid fields provided for update")

        if not current_user.is_admin:
            update_data["approved"] = False

        updated = await self.property_repo.update(property_id, update_data)
        if not updated:
            raise PropertyNotFoundError(property_id)

        logger.info(f"Property updated by {current_user.username}: {property_id}")
        return updated

    async def delete_property(self, property_id: int, current_user: User) -> None:
        """
        Delete a listing and its favorites.

        Raises:
            PropertyNotFoundError: If the listing does not exist
            InsufficientPermissionsError: If the user may not delete the listing
        """
        property_obj = await self._get_or_404(property_id)

        if not current_user.can_manage_property(property_obj.owner_id):
            raise InsufficientPermissionsError("delete this property")

        await self.property_repo.delete_property(property_id)
        logger.info(f"Property deleted by {current_user.username}: {property_id}")

    async def search_properties(self, filters: PropertySearchFilters) -> List[Property]:
        """Search approved listings, newest first."""
        return await self.property_repo.search_properties(filters)

    async def get_user_properties(self, current_user: User) -> List[Property]:
        """Get the current user's listings in any moderation state."""
        properties = await self.property_repo.get_properties_by_owner(current_user.id)
        logger.debug(f"Retrieved {len(properties)} properties for user {current_user.id}")
        return properties

    # Moderation

    async def get_pending_properties(self, current_user: User) -> List[Property]:
        self._require_admin(current_user, "view pending properties")
        return await self.property_repo.get_pending_properties()

    async def approve_property(self, property_id: int, current_user: User) -> Property:
        """
        Approve a listing so it shows up in public search.

        Raises:
            InsufficientPermissionsError: If the user is not an admin
            PropertyNotFoundError: If the listing does not exist
        """
        self._require_admin(current_user, "approve properties")

        approved = await self.property_repo.set_approved(property_id, True)
        if not approved:
            raise PropertyNotFoundError(property_id)

        logger.info(f"Property {property_id} approved by {current_user.username}")
        return approved

    async def reject_property(self, property_id: int, current_user: User) -> None:
        """
        Reject a listing. Rejected listings are deleted.

        Raises:
            InsufficientPermissionsError: If the user is not an admin
            PropertyNotFoundError: If the listing does not exist
        """
        self._require_admin(current_user, "reject properties")

        await self._get_or_404(property_id)
        await self.property_repo.delete_property(property_id)
        logger.info(f"Property {property_id} rejected by {current_user.username}")

    def _require_admin(self, current_user: User, action: str) -> None:
        if not current_user.is_admin:
            raise InsufficientPermissionsError(action)

    async def _get_or_404(self, property_id: int) -> Property:
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise PropertyNotFoundError(property_id)
        return property_obj
