"""
Caller Context

The authenticated identity that every Data-Access API call receives
explicitly: who is calling, with which role, on behalf of which agency.
Nothing in the core reads the caller from request or module state.

Agency resolution rules:
- A regular caller always acts inside their own agency. Asking for a
  different agency is refused.
- A caller without an agency is refused, unless they are a super_admin
  naming an explicit target agency.
"""
from dataclasses import dataclass
from typing import Optional

from agencyhub.core.exceptions import PermissionDenied
from agencyhub.models.user import UserRole


@dataclass(frozen=True)
class CallerContext:
    user_id: Optional[str]
    role: Optional[str]
    agency_id: Optional[str]

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    @classmethod
    def for_user(cls, user) -> "CallerContext":
        """Build a context from a loaded User row."""
        return cls(user_id=user.id, role=user.role, agency_id=user.agency_id)


def resolve_agency_id(context: CallerContext, target_agency_id: Optional[str] = None) -> str:
    """
    Return the agency a call is scoped to.

    Raises PermissionDenied when no tenant context can be established.
    """
    if context.is_super_admin:
        if target_agency_id:
            return target_agency_id
        raise PermissionDenied("super_admin requests must name a target agency")

    if not context.agency_id:
        raise PermissionDenied("Tenant context required")

    if target_agency_id and target_agency_id != context.agency_id:
        raise PermissionDenied("Cannot act on behalf of another agency")

    return context.agency_id
