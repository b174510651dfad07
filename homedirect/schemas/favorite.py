"""
Pydantic schemas for favorites.
"""

from homedirect.schemas.base import CamelModel


class FavoriteStatus(CamelModel):
    """Whether a listing is in the current user's favorites."""

    is_favorite: bool
