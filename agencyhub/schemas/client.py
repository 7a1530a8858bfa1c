"""
Client Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

STATUS_PATTERN = "^(active|inactive|pending)$"


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    industry: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ClientCreate(ClientBase):
    status: str = Field("active", pattern=STATUS_PATTERN)


class ClientUpdate(BaseModel):
    """Schema for updating a client. All fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    industry: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    notes: Optional[str] = None


class ClientResponse(ClientBase):
    id: str
    agency_id: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
