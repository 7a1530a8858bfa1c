"""
Agency Model

The agency is the tenant: every business record (clients, projects,
leads, quotes, tasks, contacts) carries its agency_id, and every user
except a super_admin belongs to exactly one agency.

An agency never outlives its last member. Removing the final user goes
through the cascade deletion engine, which deletes the agency together
with everything it owns.
"""
from sqlalchemy import Column, String, DateTime, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from agencyhub.database import Base
import uuid


class Agency(Base):
    __tablename__ = "agencies"

    # UUIDs avoid enumeration of other agencies
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)

    # marketing, design, video, therapy, ...
    industry = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Deletion is done with bulk statements by the cascade engine, so the
    # ORM must not try to manage members on its own.
    users = relationship("User", back_populates="agency", passive_deletes=True)

    __table_args__ = (
        Index('idx_agency_created', 'created_at'),
    )

    def __repr__(self):
        return f"<Agency {self.slug}>"
