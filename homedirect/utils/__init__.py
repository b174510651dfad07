"""
Utility modules for the HomeDirect API.
"""

from .auth import (
    create_session_token,
    verify_session_token,
    hash_password,
    verify_password,
    generate_verification_code,
    verification_code_expiry,
    extract_token_from_header,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    InternalServerError,
    InvalidCredentialsError,
    InvalidSessionError,
    InsufficientPermissionsError,
    EmailNotVerifiedError,
    VerificationError,
    AlreadyVerifiedError,
    PropertyNotFoundError,
    PropertyNotApprovedError,
    DuplicateResourceError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_session_token",
    "verify_session_token",
    "hash_password",
    "verify_password",
    "generate_verification_code",
    "verification_code_expiry",
    "extract_token_from_header",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "InternalServerError",
    "InvalidCredentialsError",
    "InvalidSessionError",
    "InsufficientPermissionsError",
    "EmailNotVerifiedError",
    "VerificationError",
    "AlreadyVerifiedError",
    "PropertyNotFoundError",
    "PropertyNotApprovedError",
    "DuplicateResourceError",
]
