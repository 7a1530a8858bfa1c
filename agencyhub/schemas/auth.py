"""
Authentication Schemas

Request/response models for authentication endpoints.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from agencyhub.schemas.agency import SLUG_PATTERN


class Token(BaseModel):
    """JWT token response."""
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    """Login request body. Emails are unique across agencies."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    """Create an agency and its first administrator."""
    agency_name: str = Field(..., min_length=1, max_length=255)
    agency_slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    industry: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    full_name: str = Field(..., min_length=1, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "agency_name": "Acme Digital",
                "agency_slug": "acme-digital",
                "industry": "marketing",
                "email": "owner@example.com",
                "password": "securepassword123",
                "full_name": "Dana Levi"
            }
        }
