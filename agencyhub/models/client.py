"""
Client Model

Customers of an agency. Projects, quotes and tasks may point at a
client; such references must stay inside the client's agency.
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from datetime import datetime
from agencyhub.database import Base
import uuid


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    agency_id = Column(
        String(36),
        ForeignKey("agencies.id"),
        nullable=False,
        index=True
    )

    name = Column(String(255), nullable=False)
    contact_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    industry = Column(String(100), nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, inactive, pending
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_client_agency_status', 'agency_id', 'status'),
    )

    def __repr__(self):
        return f"<Client {self.name} (agency={self.agency_id})>"
