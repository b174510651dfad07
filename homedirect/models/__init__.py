"""
Database models for HomeDirect.
Includes User, Property and Favorite models.
"""

from homedirect.models.user import User
from homedirect.models.property import Property, PropertyType, ListingType
from homedirect.models.favorite import Favorite

# Export all models for easy importing
__all__ = [
    "User",
    "Property",
    "PropertyType",
    "ListingType",
    "Favorite",
]
