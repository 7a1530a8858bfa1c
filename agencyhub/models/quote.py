"""
Quote Model

Price quotes issued to a client. Amounts are stored in agorot.
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Integer
from datetime import datetime
from agencyhub.database import Base
import uuid


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    agency_id = Column(
        String(36),
        ForeignKey("agencies.id"),
        nullable=False,
        index=True
    )

    client_id = Column(
        String(36),
        ForeignKey("clients.id"),
        nullable=False,
        index=True
    )

    quote_number = Column(String(50), unique=True, nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="draft", nullable=False)  # draft, sent, approved, rejected, expired

    subtotal = Column(Integer, default=0, nullable=False)
    vat_amount = Column(Integer, default=0, nullable=False)
    total_amount = Column(Integer, default=0, nullable=False)
    valid_until = Column(String(10), nullable=True)  # ISO date
    notes = Column(Text, nullable=True)

    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_quote_agency_status', 'agency_id', 'status'),
    )

    def __repr__(self):
        return f"<Quote {self.quote_number or self.title} (agency={self.agency_id})>"
