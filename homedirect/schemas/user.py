"""
Pydantic schemas for user requests and responses.
Handles registration input and the public user representation.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from homedirect.schemas.base import CamelModel


class UserCreate(CamelModel):
    """Registration payload (the InsertUser fields)."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=64,
        description="Login name",
        examples=["ivanov"]
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["ivanov@example.com"]
    )

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User's password (minimum 8 characters)",
        examples=["securepassword123"]
    )

    first_name: str = Field(..., min_length=1, max_length=100, examples=["Ivan"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Ivanov"])
    middle_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=32, examples=["+7 900 000-00-00"])

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator('username', 'first_name', 'last_name')
    @classmethod
    def validate_not_blank(cls, v):
        """Reject whitespace-only names."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('middle_name', 'phone_number')
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class UserResponse(CamelModel):
    """User response schema (excluding sensitive data)."""

    id: int = Field(..., description="User's unique identifier", examples=[1])
    username: str
    email: str
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    phone_number: Optional[str] = None
    is_admin: bool = False
    is_verified: bool = False
    created_at: Optional[datetime] = None
