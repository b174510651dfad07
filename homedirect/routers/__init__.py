"""
API route handlers for the HomeDirect API.
All routers are mounted under the API prefix.
"""

from .auth import router as auth_router
from .properties import router as properties_router
from .admin import router as admin_router
from .favorites import router as favorites_router

__all__ = ["auth_router", "properties_router", "admin_router", "favorites_router"]
