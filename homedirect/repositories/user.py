"""
User repository for authentication and email verification operations.
Provides secure user operations with password handling and verification code storage.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from homedirect.repositories.base import BaseRepository
from homedirect.models.user import User
from datetime import datetime
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    Usernames and emails are matched case-insensitively.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: username, email, password, first_name, last_name

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the username/email is taken
        """
        try:
            email = User.validate_email_format(user_data["email"])
            username = user_data["username"].strip()

            if await self.get_by_username(username):
                raise ValueError("Username already exists")
            if await self.get_by_email(email):
                raise ValueError("Email already exists")

            create_data = dict(user_data)
            password = create_data.pop("password")
            create_data.update({
                "username": username,
                "email": email,
                "hashed_password": User.hash_password(password),
                "is_admin": create_data.get("is_admin", False),
                "is_verified": create_data.get("is_verified", False),
            })

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.username} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        normalized_email = email.lower().strip()
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == normalized_email)
        )
        user = result.scalar_one_or_none()

        if not user:
            logger.debug(f"User with email {email} not found")
        return user

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by login name."""
        normalized = username.lower().strip()
        result = await self.db.execute(
            select(User).where(func.lower(User.username) == normalized)
        )
        return result.scalar_one_or_none()

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """
        Authenticate user with username and password.

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_username(username)

        if not user:
            logger.debug(f"Authentication failed: user {username} not found")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {username}")
            return None

        return user

    async def set_verification_code(self, user_id: int, code: str, expires_at: datetime) -> Optional[User]:
        """Store a fresh verification code, replacing any outstanding one."""
        return await self.update(user_id, {
            "verification_code": code,
            "verification_code_expires_at": expires_at,
        })

    async def mark_verified(self, user_id: int) -> Optional[User]:
        """Mark the email as verified and invalidate the consumed code."""
        try:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(
                    is_verified=True,
                    verification_code=None,
                    verification_code_expires_at=None,
                )
                .execution_options(synchronize_session="fetch")
            )
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                return None
            await self.db.commit()

            user = await self.get_by_id(user_id)
            await self.db.refresh(user)
            return user
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to mark user {user_id} verified: {e}")
            raise
