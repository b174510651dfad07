"""
Service layer for business logic implementation.
Contains services for authentication, email, listings, favorites and error handling.
"""

from .auth import AuthService
from .email import EmailService
from .property import PropertyService
from .favorite import FavoriteService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "EmailService",
    "PropertyService",
    "FavoriteService",
    "ErrorHandlerService"
]
