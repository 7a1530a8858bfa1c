"""
Lead Model

Prospects collected from ads, forms or manual entry. A lead that was
converted keeps a pointer to the client/project it became.
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Integer
from datetime import datetime
from agencyhub.database import Base
import uuid


class Lead(Base):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    agency_id = Column(
        String(36),
        ForeignKey("agencies.id"),
        nullable=False,
        index=True
    )

    name = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    business_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    industry = Column(String(100), nullable=True)
    source = Column(String(50), nullable=False)  # facebook_ads, google_ads, manual, website, referral
    status = Column(String(20), default="new", nullable=False)  # new, contacted, qualified, converted, lost
    priority = Column(String(20), default="medium", nullable=False)
    budget = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # SET NULL so the cascade may remove projects before leads
    converted_to_client_id = Column(String(36), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    converted_to_project_id = Column(String(36), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_lead_agency_status', 'agency_id', 'status'),
    )

    def __repr__(self):
        return f"<Lead {self.name} source={self.source} (agency={self.agency_id})>"
