"""
FastAPI dependency injection utilities for sessions, services and filters.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from homedirect.config import settings
from homedirect.database import get_db
from homedirect.models.user import User
from homedirect.schemas.property import PropertyFilterParams
from homedirect.services.auth import AuthService
from homedirect.services.favorite import FavoriteService
from homedirect.services.property import PropertyService
from homedirect.utils.exceptions import (
    UnauthorizedError,
    InvalidSessionError,
    InsufficientPermissionsError
)


# Bearer tokens are accepted next to the session cookie
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session

    Returns:
        PropertyService instance
    """
    return PropertyService(db)


async def get_favorite_service(db: AsyncSession = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[str]:
    """
    Read the session token from the session cookie or an Authorization header.
    The cookie wins when both are present.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the session.

    Raises:
        UnauthorizedError: If no session is present
        InvalidSessionError: If the session token is invalid or expired
    """
    if not token:
        raise UnauthorizedError()

    return await auth_service.get_current_user(token)


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user with admin rights.

    Raises:
        InsufficientPermissionsError: If user is not an admin
    """
    if not current_user.is_admin:
        raise InsufficientPermissionsError("access admin resources")

    return current_user


async def get_optional_current_user(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get current user if a valid session is present, otherwise return None.
    Used by public endpoints that show more to owners and admins.
    """
    if not token:
        return None

    try:
        return await auth_service.get_current_user(token)
    except InvalidSessionError:
        return None


def get_property_filters(
    listing_type: Optional[str] = Query(None, alias="listingType", description="sale, rent or all"),
    property_type: Optional[str] = Query(None, alias="propertyType", description="apartment, house, commercial, land or all"),
    region: Optional[str] = Query(None, description="Region substring"),
    city: Optional[str] = Query(None, description="City substring"),
    district: Optional[str] = Query(None, description="District substring"),
    price_min: Optional[str] = Query(None, alias="priceMin", description="Minimum price"),
    price_max: Optional[str] = Query(None, alias="priceMax", description="Maximum price"),
    rooms: Optional[str] = Query(None, description="Exact number of rooms"),
    area: Optional[str] = Query(None, description="Minimum area in square meters"),
    area_min: Optional[str] = Query(None, alias="areaMin", description="Minimum area in square meters"),
    area_max: Optional[str] = Query(None, alias="areaMax", description="Maximum area in square meters")
) -> PropertyFilterParams:
    """Collect the listing filters from the query string."""
    return PropertyFilterParams(
        listing_type=listing_type,
        property_type=property_type,
        region=region,
        city=city,
        district=district,
        price_min=price_min,
        price_max=price_max,
        rooms=rooms,
        area=area,
        area_min=area_min,
        area_max=area_max
    )
