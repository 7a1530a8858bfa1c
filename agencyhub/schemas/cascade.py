"""
Cascade Schemas

Response for user deletion and agency purge.
"""
from pydantic import BaseModel
from typing import Dict, Optional


class CascadeReportResponse(BaseModel):
    user_id: Optional[str]
    email: Optional[str]
    agency_id: Optional[str]
    agency_deleted: bool
    deleted: Dict[str, int]
    attempts: int

    class Config:
        from_attributes = True
