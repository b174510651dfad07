"""
Pydantic schemas for request/response validation.
"""

from .base import CamelModel, MessageResponse

# Authentication schemas
from .auth import (
    LoginRequest,
    VerifyEmailRequest,
    EmailRequest
)

# User schemas
from .user import (
    UserCreate,
    UserResponse
)

# Property schemas
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyFilterParams
)

from .favorite import FavoriteStatus

__all__ = [
    "CamelModel",
    "MessageResponse",

    # Authentication
    "LoginRequest",
    "VerifyEmailRequest",
    "EmailRequest",

    # User
    "UserCreate",
    "UserResponse",

    # Property
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyFilterParams",

    # Favorites
    "FavoriteStatus"
]
