"""
Repository layer for data access operations.
"""

from homedirect.repositories.base import BaseRepository
from homedirect.repositories.property import PropertyRepository, PropertySearchFilters
from homedirect.repositories.user import UserRepository
from homedirect.repositories.favorite import FavoriteRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "UserRepository",
    "FavoriteRepository"
]
