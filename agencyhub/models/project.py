"""
Project Model

Projects are agency-scoped and optionally attached to a client.
Both the client and the referenced users must belong to the project's
agency (checked by the tenant store before insert/update).
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship
from datetime import datetime
from agencyhub.database import Base
import uuid


class Project(Base):
    __tablename__ = "projects"

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
        nullable=True,
        index=True
    )

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=True)  # website, mobile-app, video-editing, ...
    status = Column(
        String(20),
        default="planning",
        nullable=False,
        index=True
    )  # planning, in_progress, completed, on_hold, cancelled
    priority = Column(String(20), default="medium", nullable=False)  # low, medium, high, urgent

    # In agorot (minor currency unit)
    budget = Column(Integer, nullable=True)
    start_date = Column(String(10), nullable=True)  # ISO date
    end_date = Column(String(10), nullable=True)

    # Removing a member keeps the records they worked on
    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    client = relationship("Client")

    __table_args__ = (
        Index('idx_project_agency_status', 'agency_id', 'status'),
        Index('idx_project_agency_client', 'agency_id', 'client_id'),
    )

    def __repr__(self):
        return f"<Project {self.name} (agency={self.agency_id})>"
