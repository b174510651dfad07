"""
Authentication service for registration, login, sessions and email verification.
Handles session token issuing, verification code lifecycle and the admin account seed.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from homedirect.config import settings
from homedirect.repositories.user import UserRepository
from homedirect.models.user import User
from homedirect.schemas.user import UserCreate
from homedirect.services.email import EmailService
from homedirect.utils.auth import (
    create_session_token,
    verify_session_token,
    generate_verification_code,
    verification_code_expiry
)
from homedirect.utils.exceptions import (
    InvalidCredentialsError,
    InvalidSessionError,
    NotFoundError,
    ValidationError,
    VerificationError,
    AlreadyVerifiedError,
    DuplicateResourceError
)
from jose import JWTError
import secrets
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and sessions.
    Handles registration, credential checks and the email verification flow.
    """

    def __init__(self, db_session: AsyncSession, email_service: Optional[EmailService] = None):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.email_service = email_service or EmailService()

    async def register(self, user_data: UserCreate) -> User:
        """
        Create an unverified account and mail it a verification code.

        Args:
            user_data: Registration payload

        Returns:
            The newly created user

        Raises:
            DuplicateResourceError: If the username or email is taken
            ValidationError: If the email address is malformed
        """
        try:
            user = await self.user_repo.create_user(user_data.model_dump())
        except ValueError as e:
            message = str(e)
            if message == "Username already exists":
                raise DuplicateResourceError("User", "username")
            if message == "Email already exists":
                raise DuplicateResourceError("User", "email")
            raise ValidationError(message)

        logger.info(f"User registered: {user.username} (ID: {user.id})")
        return await self._issue_verification_code(user)

    async def authenticate_user(self, username: str, password: str) -> User:
        """
        Authenticate user with username and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid
        """
        if not username or not password:
            raise InvalidCredentialsError()

        user = await self.user_repo.authenticate_user(username, password)

        if not user:
            logger.warning(f"Failed authentication attempt for username: {username}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.username}")
        return user

    async def authenticate_admin(self, username: str, password: str) -> User:
        """
        Authenticate an administrator.

        Non-admin accounts are rejected with the same error as bad credentials.

        Raises:
            InvalidCredentialsError: If credentials are invalid or the user is not an admin
        """
        user = await self.user_repo.authenticate_user(username, password)

        if not user or not user.is_admin:
            logger.warning(f"Failed admin authentication attempt for username: {username}")
            raise InvalidCredentialsError("Invalid admin credentials")

        logger.info(f"Admin authenticated successfully: {user.username}")
        return user

    def create_session(self, user: User) -> str:
        """Issue a signed session token for a user."""
        return create_session_token(
            user_id=user.id,
            username=user.username,
            is_admin=user.is_admin
        )

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from a session token.

        Raises:
            InvalidSessionError: If the token is invalid, expired or its user is gone
        """
        try:
            token_payload = verify_session_token(token)
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            raise InvalidSessionError()

        user = await self.user_repo.get_by_id(token_payload.user_id)
        if not user:
            raise InvalidSessionError()

        return user

    async def verify_email(self, email: str, code: str) -> User:
        """
        Consume a verification code.

        Returns:
            The verified user

        Raises:
            NotFoundError: If no account uses the email
            AlreadyVerifiedError: If the email is already verified
            VerificationError: If the code is wrong or expired
        """
        user = await self._get_user_by_email(email)

        if user.is_verified:
            raise AlreadyVerifiedError()

        if not user.verification_code or not secrets.compare_digest(
            user.verification_code.encode(), code.strip().encode()
        ):
            logger.warning(f"Wrong verification code submitted for {user.email}")
            raise VerificationError()

        if user.verification_code_expired():
            logger.info(f"Expired verification code submitted for {user.email}")
            raise VerificationError("Verification code has expired")

        verified = await self.user_repo.mark_verified(user.id)
        logger.info(f"Email verified for user {verified.username}")
        return verified

    async def request_verification(self, email: str) -> User:
        """
        Replace the outstanding verification code and mail the new one.

        Raises:
            NotFoundError: If no account uses the email
            AlreadyVerifiedError: If the email is already verified
        """
        user = await self._get_user_by_email(email)

        if user.is_verified:
            raise AlreadyVerifiedError()

        return await self._issue_verification_code(user)

    resend_verification = request_verification

    async def seed_admin(self) -> Optional[User]:
        """
        Create the configured administrator account if it does not exist yet.

        Returns:
            The admin user when seeding is configured and succeeds, None otherwise
        """
        if not settings.admin_seed_enabled:
            return None

        existing = await self.user_repo.get_by_username(settings.admin_username)
        if existing:
            if not existing.is_admin:
                logger.warning(f"Configured admin username {existing.username} belongs to a regular user")
            return existing

        try:
            admin = await self.user_repo.create_user({
                "username": settings.admin_username,
                "email": settings.admin_email,
                "password": settings.admin_password,
                "first_name": "Admin",
                "last_name": "User",
                "is_admin": True,
                "is_verified": True,
            })
        except ValueError as e:
            logger.error(f"Admin account not seeded: {e}")
            return None
        logger.info(f"Seeded admin account: {admin.username}")
        return admin

    async def _get_user_by_email(self, email: str) -> User:
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundError("User")
        return user

    async def _issue_verification_code(self, user: User) -> User:
        code = generate_verification_code()
        updated = await self.user_repo.set_verification_code(
            user.id, code, verification_code_expiry()
        )

        sent = await self.email_service.send_verification_email(updated, code)
        if not sent:
            logger.error(f"Verification email to {updated.email} was not delivered")

        return updated
