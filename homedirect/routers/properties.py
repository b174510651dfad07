"""
Listing API endpoints for search, CRUD and the current user's submissions.
Public search only ever returns approved listings.
"""

from fastapi import APIRouter, Depends, Path, status
from typing import List, Optional

from homedirect.models.user import User
from homedirect.services.property import PropertyService
from homedirect.services.error_handler import ERROR_RESPONSES
from homedirect.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyFilterParams
)
from homedirect.utils.dependencies import (
    get_current_user,
    get_optional_current_user,
    get_property_service,
    get_property_filters
)


router = APIRouter(tags=["Properties"])


def _to_response(properties) -> List[PropertyResponse]:
    return [PropertyResponse.model_validate(p.to_dict()) for p in properties]


@router.get(
    "/listings",
    response_model=List[PropertyResponse],
    summary="Search listings",
    description="Approved listings matching the filters, newest first"
)
async def search_listings(
    filters: PropertyFilterParams = Depends(get_property_filters),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.search_properties(filters.to_search_filters())
    return _to_response(properties)


@router.get(
    "/properties",
    response_model=List[PropertyResponse],
    summary="List properties",
    description="Same result as /listings"
)
async def list_properties(
    filters: PropertyFilterParams = Depends(get_property_filters),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.search_properties(filters.to_search_filters())
    return _to_response(properties)


@router.get(
    "/properties/{property_id}",
    response_model=PropertyResponse,
    summary="Get property",
    description="Unapproved listings are visible to their owner and administrators only",
    responses={403: ERROR_RESPONSES[403], 404: ERROR_RESPONSES[404]}
)
async def get_property(
    property_id: int = Path(..., ge=1, description="Listing ID"),
    current_user: Optional[User] = Depends(get_optional_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Raises:
        PropertyNotFoundError: If the listing does not exist
        PropertyNotApprovedError: If the listing is pending and the caller may not see it
    """
    property_obj = await property_service.get_property(property_id, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.post(
    "/properties",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Submit a listing for moderation. Requires a verified email.",
    responses={401: ERROR_RESPONSES[401], 403: ERROR_RESPONSES[403], 422: ERROR_RESPONSES[422]}
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a new listing owned by the current user.

    Raises:
        EmailNotVerifiedError: If the user's email is not verified
    """
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.put(
    "/properties/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Owner or administrator only. An owner's edit sends the listing back to moderation.",
    responses={401: ERROR_RESPONSES[401], 403: ERROR_RESPONSES[403], 404: ERROR_RESPONSES[404]}
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: int = Path(..., ge=1, description="Listing ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.update_property(property_id, property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.delete(
    "/properties/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Owner or administrator only",
    responses={401: ERROR_RESPONSES[401], 403: ERROR_RESPONSES[403], 404: ERROR_RESPONSES[404]}
)
async def delete_property(
    property_id: int = Path(..., ge=1, description="Listing ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property(property_id, current_user)


@router.get(
    "/user/properties",
    response_model=List[PropertyResponse],
    summary="My properties",
    description="The current user's listings in any moderation state",
    responses={401: ERROR_RESPONSES[401]}
)
async def get_my_properties(
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_user_properties(current_user)
    return _to_response(properties)
