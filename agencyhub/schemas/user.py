"""
User Schemas

Request/response models for user operations.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from agencyhub.models.user import UserRole


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    full_name: Optional[str] = Field(None, max_length=255)


class UserCreate(UserBase):
    """
    Schema for adding a user to an agency.

    password may be left out for users who will be invited later; they
    cannot log in until one is set.
    """
    password: Optional[str] = Field(None, min_length=8, max_length=100)
    role: UserRole = UserRole.TEAM_MEMBER


class UserUpdate(BaseModel):
    """Schema for updating a user. All fields optional."""
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=8, max_length=100)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserResponse(UserBase):
    """User response schema (excludes sensitive data)."""
    id: str
    agency_id: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True  # Allows creating from ORM models
