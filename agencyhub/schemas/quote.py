"""
Quote Schemas

Amounts are integers in the minor currency unit.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

STATUS_PATTERN = "^(draft|sent|approved|rejected|expired)$"


class QuoteBase(BaseModel):
    client_id: str
    title: str = Field(..., min_length=1, max_length=255)
    quote_number: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    subtotal: int = Field(0, ge=0)
    vat_amount: int = Field(0, ge=0)
    total_amount: int = Field(0, ge=0)
    valid_until: Optional[str] = Field(None, max_length=10)
    notes: Optional[str] = None


class QuoteCreate(QuoteBase):
    status: str = Field("draft", pattern=STATUS_PATTERN)


class QuoteUpdate(BaseModel):
    """Schema for updating a quote. All fields optional."""
    client_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    quote_number: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    subtotal: Optional[int] = Field(None, ge=0)
    vat_amount: Optional[int] = Field(None, ge=0)
    total_amount: Optional[int] = Field(None, ge=0)
    valid_until: Optional[str] = Field(None, max_length=10)
    notes: Optional[str] = None


class QuoteResponse(QuoteBase):
    id: str
    agency_id: str
    status: str
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
