"""
Contact Model

Address-book entries of an agency. No references to other records.
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from datetime import datetime
from agencyhub.database import Base
import uuid


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    agency_id = Column(
        String(36),
        ForeignKey("agencies.id"),
        nullable=False,
        index=True
    )

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Contact {self.name} (agency={self.agency_id})>"
