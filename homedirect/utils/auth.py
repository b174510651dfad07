"""
Authentication utilities for session tokens, password hashing and verification codes.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from homedirect.config import settings
from homedirect.models.user import pwd_context
import secrets


class TokenPayload:
    """Session token payload structure."""

    def __init__(self, user_id: int, username: str, is_admin: bool, exp: datetime):
        self.user_id = user_id
        self.username = username
        self.is_admin = is_admin
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        return cls(
            user_id=int(data["sub"]),
            username=data["username"],
            is_admin=bool(data.get("admin", False)),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def session_max_age() -> timedelta:
    return timedelta(days=settings.session_max_age_days)


def create_session_token(
    user_id: int,
    username: str,
    is_admin: bool,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed session token with user claims.

    Args:
        user_id: User's ID
        username: User's login name
        is_admin: Whether the user is an administrator
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else session_max_age())

    to_encode = {
        "sub": str(user_id),
        "username": username,
        "admin": is_admin,
        "exp": expire,
        "iat": now,
        "type": "session"
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def verify_session_token(token: str) -> TokenPayload:
    """
    Verify and decode a session token.

    Raises:
        JWTError: If token is invalid, of the wrong type or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise
    except Exception as e:
        raise JWTError(f"Token validation error: {str(e)}")

    if payload.get("type") != "session":
        raise JWTError("Invalid token type")

    if not payload.get("sub") or not payload.get("username"):
        raise JWTError("Invalid token payload")

    return TokenPayload.from_dict(payload)


def hash_password(password: str) -> str:
    """
    Hash password.

    Raises:
        ValueError: If password is too short
    """
    if not password or len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def generate_verification_code(length: Optional[int] = None) -> str:
    """
    Generate a numeric verification code without a leading zero.

    Args:
        length: Number of digits (defaults to the configured length)
    """
    length = length or settings.verification_code_length
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def verification_code_expiry(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.verification_code_ttl_minutes)


def extract_token_from_header(authorization: str) -> str:
    """
    Extract token from an Authorization header.

    Raises:
        ValueError: If header format is invalid
    """
    if not authorization:
        raise ValueError("Authorization header is required")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise ValueError("Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise ValueError("Invalid authentication scheme")
    return token
