"""
Permission System (RBAC)

The authorization gate: a fixed table of which role may exercise which
capability. is_allowed() is a pure lookup and is total, so any value for
role or capability (unknown strings, None, other types) simply yields
False.

Capabilities describe categories of mutation; reads are governed by
tenant scoping alone.
"""
import enum
from typing import Any, Dict, FrozenSet

from agencyhub.core.exceptions import PermissionDenied
from agencyhub.models.user import UserRole
from agencyhub.utils.logging import caller_extra, get_logger, log_security_event

logger = get_logger(__name__)


class Capability(str, enum.Enum):
    MANAGE_CLIENTS = "manage-clients"
    MANAGE_PROJECTS = "manage-projects"
    MANAGE_TASKS = "manage-tasks"
    MANAGE_TEAM = "manage-team"
    MANAGE_ASSETS = "manage-assets"


ROLE_CAPABILITIES: Dict[str, FrozenSet[str]] = {
    UserRole.SUPER_ADMIN.value: frozenset(c.value for c in Capability),
    UserRole.AGENCY_ADMIN.value: frozenset(c.value for c in Capability),
    UserRole.TEAM_MEMBER.value: frozenset({
        Capability.MANAGE_CLIENTS.value,
        Capability.MANAGE_PROJECTS.value,
        Capability.MANAGE_TASKS.value,
        Capability.MANAGE_ASSETS.value,
    }),
    UserRole.CLIENT.value: frozenset(),
}


def is_allowed(role: Any, capability: Any) -> bool:
    """Return True if role may exercise capability."""
    # str-based enums compare equal to their values, plain strings pass as is
    if not isinstance(role, str) or not isinstance(capability, str):
        return False
    role_key = role.value if isinstance(role, enum.Enum) else role
    capability_key = capability.value if isinstance(capability, enum.Enum) else capability
    return capability_key in ROLE_CAPABILITIES.get(role_key, frozenset())


def require_capability(context, capability: Capability) -> None:
    """
    Raise PermissionDenied unless the caller's role grants capability.

    Must be called before any side effect of a mutating operation.
    """
    if is_allowed(context.role, capability):
        return

    log_security_event("permission_denied", caller_extra(context, capability=capability.value), logger)
    raise PermissionDenied(f"Role '{context.role}' lacks capability '{capability.value}'")
