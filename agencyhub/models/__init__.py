"""
Database Models

Every model except Agency and super_admin users carries agency_id.
"""
from agencyhub.models.agency import Agency
from agencyhub.models.user import User, UserRole
from agencyhub.models.client import Client
from agencyhub.models.project import Project
from agencyhub.models.lead import Lead
from agencyhub.models.quote import Quote
from agencyhub.models.contact import Contact
from agencyhub.models.task import Task

__all__ = [
    "Agency",
    "User",
    "UserRole",
    "Client",
    "Project",
    "Lead",
    "Quote",
    "Contact",
    "Task",
]
