"""
Task Schemas

A task may hang off a project, a lead or a client, or stand alone.
Meetings and calls use start_time/end_time.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

STATUS_PATTERN = "^(todo|in_progress|review|completed)$"
PRIORITY_PATTERN = "^(low|medium|high|urgent)$"
TYPE_PATTERN = "^(task|meeting|call|email)$"


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    project_id: Optional[str] = None
    lead_id: Optional[str] = None
    client_id: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[str] = Field(None, max_length=10)
    start_time: Optional[str] = Field(None, max_length=32)
    end_time: Optional[str] = Field(None, max_length=32)
    estimated_hours: Optional[int] = Field(None, ge=0)


class TaskCreate(TaskBase):
    status: str = Field("todo", pattern=STATUS_PATTERN)
    priority: str = Field("medium", pattern=PRIORITY_PATTERN)
    type: str = Field("task", pattern=TYPE_PATTERN)


class TaskUpdate(BaseModel):
    """Schema for updating a task. All fields optional."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    project_id: Optional[str] = None
    lead_id: Optional[str] = None
    client_id: Optional[str] = None
    assigned_to: Optional[str] = None
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    priority: Optional[str] = Field(None, pattern=PRIORITY_PATTERN)
    type: Optional[str] = Field(None, pattern=TYPE_PATTERN)
    due_date: Optional[str] = Field(None, max_length=10)
    start_time: Optional[str] = Field(None, max_length=32)
    end_time: Optional[str] = Field(None, max_length=32)
    estimated_hours: Optional[int] = Field(None, ge=0)


class TaskResponse(TaskBase):
    id: str
    agency_id: str
    status: str
    priority: str
    type: str
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
