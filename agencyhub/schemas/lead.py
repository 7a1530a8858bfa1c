"""
Lead Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

SOURCE_PATTERN = "^(facebook_ads|google_ads|manual|website|referral)$"
STATUS_PATTERN = "^(new|contacted|qualified|converted|lost)$"
PRIORITY_PATTERN = "^(low|medium|high|urgent)$"


class LeadBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    business_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    industry: Optional[str] = Field(None, max_length=100)
    source: str = Field(..., pattern=SOURCE_PATTERN)
    budget: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    assigned_to: Optional[str] = None


class LeadCreate(LeadBase):
    status: str = Field("new", pattern=STATUS_PATTERN)
    priority: str = Field("medium", pattern=PRIORITY_PATTERN)


class LeadUpdate(BaseModel):
    """
    Schema for updating a lead. All fields optional.

    Setting converted_to_client_id / converted_to_project_id records what
    the lead turned into.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    business_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    industry: Optional[str] = Field(None, max_length=100)
    source: Optional[str] = Field(None, pattern=SOURCE_PATTERN)
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    priority: Optional[str] = Field(None, pattern=PRIORITY_PATTERN)
    budget: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    assigned_to: Optional[str] = None
    converted_to_client_id: Optional[str] = None
    converted_to_project_id: Optional[str] = None


class LeadResponse(LeadBase):
    id: str
    agency_id: str
    status: str
    priority: str
    converted_to_client_id: Optional[str]
    converted_to_project_id: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
