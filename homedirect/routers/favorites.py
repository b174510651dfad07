"""
Favorites API endpoints for the current user.
"""

from fastapi import APIRouter, Depends, Path, status
from typing import List

from homedirect.models.user import User
from homedirect.services.favorite import FavoriteService
from homedirect.services.error_handler import ERROR_RESPONSES
from homedirect.schemas.favorite import FavoriteStatus
from homedirect.schemas.property import PropertyResponse
from homedirect.utils.dependencies import get_current_user, get_favorite_service


router = APIRouter(
    prefix="/favorites",
    tags=["Favorites"],
    responses={401: ERROR_RESPONSES[401]}
)


@router.get(
    "",
    response_model=List[PropertyResponse],
    summary="My favorites",
    description="Approved listings saved by the current user"
)
async def get_favorites(
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> List[PropertyResponse]:
    properties = await favorite_service.get_favorites(current_user)
    return [PropertyResponse.model_validate(p.to_dict()) for p in properties]


@router.post(
    "/{property_id}",
    response_model=FavoriteStatus,
    status_code=status.HTTP_201_CREATED,
    summary="Add to favorites",
    responses={404: ERROR_RESPONSES[404]}
)
async def add_favorite(
    property_id: int = Path(..., ge=1, description="Listing ID"),
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteStatus:
    await favorite_service.add_favorite(property_id, current_user)
    return FavoriteStatus(is_favorite=True)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove from favorites"
)
async def remove_favorite(
    property_id: int = Path(..., ge=1, description="Listing ID"),
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> None:
    await favorite_service.remove_favorite(property_id, current_user)


@router.get(
    "/{property_id}",
    response_model=FavoriteStatus,
    summary="Favorite status"
)
async def get_favorite_status(
    property_id: int = Path(..., ge=1, description="Listing ID"),
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteStatus:
    is_favorite = await favorite_service.is_favorite(property_id, current_user)
    return FavoriteStatus(is_favorite=is_favorite)
