"""
User Pydantic Schemas

Schemas:
- UserCreate: Registration data (name, email, password)
- UserResponse: The caller's own account (never exposes the password)
- UserSummary: The populated owner/author reference embedded in books
  and reviews
- TokenResponse: JWT issued by /auth/login
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """
    Schema for user registration.

    Example request body:
    {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": "SecurePass123"
    }
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name",
        examples=["Jane Doe"],
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jane@example.com"],
    )

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 chars, must include a letter and a number)",
        examples=["SecurePass123"],
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        """Validate and normalize the display name."""
        if not v.strip():
            raise ValueError("Name cannot be empty or whitespace")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str) -> str:
        """
        Validate password strength.

        Requirements:
        - At least 8 characters (enforced by min_length)
        - At least 1 letter
        - At least 1 number
        """
        if not re.search(r"[A-Za-z]", v):
            raise ValueError("Password must contain at least one letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one number")
        return v


class UserSummary(BaseModel):
    """Populated user reference (book owner, review author)."""

    id: int = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    """Full account data returned to the account holder."""

    is_active: bool = Field(..., description="Whether the account is active")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Jane Doe",
                "email": "jane@example.com",
                "is_active": True,
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class TokenResponse(BaseModel):
    """Access token returned by a successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Token lifetime in seconds")
