"""
User Model

Users belong to at most one agency. Only super_admin users may exist
without an agency; everyone else is a member of exactly one.

Email is unique across the whole system (not per agency), which is
what lets the cascade engine resolve a user by email alone.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from agencyhub.database import Base
import uuid
import enum


class UserRole(str, enum.Enum):
    """
    User roles.

    SUPER_ADMIN: platform operator, not bound to an agency
    AGENCY_ADMIN: owns an agency, manages its team
    TEAM_MEMBER: works on the agency's clients, projects and tasks
    CLIENT: portal user of one of the agency's clients, read-only
    """
    SUPER_ADMIN = "super_admin"
    AGENCY_ADMIN = "agency_admin"
    TEAM_MEMBER = "team_member"
    CLIENT = "client"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)

    # Stored as plain text so rows with a role the code does not know about
    # can still be loaded (and then denied by the authorization gate).
    role = Column(String(20), default=UserRole.AGENCY_ADMIN.value, nullable=False, index=True)

    # Nullable only for super_admin; enforced in the tenant store
    agency_id = Column(
        String(36),
        ForeignKey("agencies.id"),
        nullable=True,
        index=True
    )

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    agency = relationship("Agency", back_populates="users")

    __table_args__ = (
        # Membership count used by the cascade engine
        Index('idx_user_agency_role', 'agency_id', 'role'),
    )

    def __repr__(self):
        return f"<User {self.email} (agency={self.agency_id})>"
