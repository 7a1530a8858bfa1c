"""
Project Schemas

Request/response models for project operations.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

STATUS_PATTERN = "^(planning|in_progress|completed|on_hold|cancelled)$"
PRIORITY_PATTERN = "^(low|medium|high|urgent)$"


class ProjectBase(BaseModel):
    """Base project schema."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[str] = Field(None, max_length=50)
    client_id: Optional[str] = None
    budget: Optional[int] = Field(None, ge=0)
    start_date: Optional[str] = Field(None, max_length=10)
    end_date: Optional[str] = Field(None, max_length=10)
    assigned_to: Optional[str] = None


class ProjectCreate(ProjectBase):
    """Schema for creating a project."""
    status: str = Field("planning", pattern=STATUS_PATTERN)
    priority: str = Field("medium", pattern=PRIORITY_PATTERN)


class ProjectUpdate(BaseModel):
    """Schema for updating a project. All fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[str] = Field(None, max_length=50)
    client_id: Optional[str] = None
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    priority: Optional[str] = Field(None, pattern=PRIORITY_PATTERN)
    budget: Optional[int] = Field(None, ge=0)
    start_date: Optional[str] = Field(None, max_length=10)
    end_date: Optional[str] = Field(None, max_length=10)
    assigned_to: Optional[str] = None


class ProjectResponse(ProjectBase):
    """Project response schema."""
    id: str
    agency_id: str
    status: str
    priority: str
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
