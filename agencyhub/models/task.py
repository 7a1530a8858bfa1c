"""
Task Model

Tasks can hang off a project, a lead or a client (or none of them).
Whatever they reference has to live in the task's agency.
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Integer
from datetime import datetime
from agencyhub.database import Base
import uuid


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    agency_id = Column(
        String(36),
        ForeignKey("agencies.id"),
        nullable=False,
        index=True
    )

    project_id = Column(String(36), ForeignKey("projects.id"), nullable=True, index=True)
    lead_id = Column(String(36), ForeignKey("leads.id"), nullable=True, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="todo", nullable=False)  # todo, in_progress, review, completed
    priority = Column(String(20), default="medium", nullable=False)  # low, medium, high, urgent
    type = Column(String(20), default="task", nullable=False)  # task, meeting, call, email

    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    due_date = Column(String(10), nullable=True)  # ISO date
    start_time = Column(String(32), nullable=True)  # ISO datetime, meetings/calls
    end_time = Column(String(32), nullable=True)
    estimated_hours = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_task_agency_status', 'agency_id', 'status'),
        Index('idx_task_assignee', 'assigned_to', 'status'),
    )

    def __repr__(self):
        return f"<Task {self.title} (agency={self.agency_id})>"
