"""
Moderation API endpoints. Every route requires an administrator session.
"""

from fastapi import APIRouter, Depends, Path, status
from typing import List

from homedirect.models.user import User
from homedirect.services.property import PropertyService
from homedirect.services.error_handler import ERROR_RESPONSES
from homedirect.schemas.property import PropertyResponse
from homedirect.utils.dependencies import get_current_admin_user, get_property_service


router = APIRouter(
    prefix="/admin",
    tags=["Moderation"],
    responses={401: ERROR_RESPONSES[401], 403: ERROR_RESPONSES[403]}
)


@router.get(
    "/pending-properties",
    response_model=List[PropertyResponse],
    summary="Pending listings",
    description="Listings awaiting moderation, oldest first"
)
async def get_pending_properties(
    admin_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_pending_properties(admin_user)
    return [PropertyResponse.model_validate(p.to_dict()) for p in properties]


@router.post(
    "/properties/{property_id}/approve",
    response_model=PropertyResponse,
    summary="Approve listing",
    responses={404: ERROR_RESPONSES[404]}
)
async def approve_property(
    property_id: int = Path(..., ge=1, description="Listing ID"),
    admin_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.approve_property(property_id, admin_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.post(
    "/properties/{property_id}/reject",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reject listing",
    description="Rejected listings are deleted together with their favorites",
    responses={404: ERROR_RESPONSES[404]}
)
async def reject_property(
    property_id: int = Path(..., ge=1, description="Listing ID"),
    admin_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.reject_property(property_id, admin_user)
