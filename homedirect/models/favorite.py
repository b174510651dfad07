"""
Favorite model joining users to the listings they saved.
"""

from sqlalchemy import Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from homedirect.database import Base


class Favorite(Base):
    """
    Many-to-many join between users and listings.
    Has no lifecycle of its own: created on toggle-on, deleted on toggle-off.
    """

    __tablename__ = "favorites"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True
    )

    property_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        primary_key=True,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, property_id={self.property_id})>"
