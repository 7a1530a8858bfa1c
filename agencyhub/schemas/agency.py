"""
Agency Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

SLUG_PATTERN = "^[a-z0-9]+(?:-[a-z0-9]+)*$"


class AgencyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    industry: Optional[str] = Field(None, max_length=100)


class AgencyUpdate(BaseModel):
    """Schema for updating agency settings. All fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    industry: Optional[str] = Field(None, max_length=100)


class AgencyResponse(AgencyBase):
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
