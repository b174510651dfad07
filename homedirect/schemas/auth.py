"""
Pydantic schemas for authentication and email verification requests.
"""

from pydantic import EmailStr, Field, field_validator
from homedirect.schemas.base import CamelModel


class LoginRequest(CamelModel):
    """Login request schema, shared by the user and admin endpoints."""

    username: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Login name",
        examples=["ivanov"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="User's password",
        examples=["securepassword123"]
    )


class VerifyEmailRequest(CamelModel):
    """Email address plus the code that was mailed to it."""

    email: EmailStr = Field(..., examples=["ivanov@example.com"])
    code: str = Field(..., min_length=1, max_length=16, examples=["482913"])

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator('code')
    @classmethod
    def strip_code(cls, v):
        return v.strip()


class EmailRequest(CamelModel):
    """Body of the request/resend verification endpoints."""

    email: EmailStr = Field(..., examples=["ivanov@example.com"])

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()
