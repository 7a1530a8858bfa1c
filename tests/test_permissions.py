import pytest

from agencyhub.core.context import CallerContext
from agencyhub.core.exceptions import PermissionDenied
from agencyhub.core.permissions import Capability, ROLE_CAPABILITIES, is_allowed, require_capability
from agencyhub.models import UserRole

EXPECTED = {
    "super_admin": {"manage-clients", "manage-projects", "manage-tasks", "manage-team", "manage-assets"},
    "agency_admin": {"manage-clients", "manage-projects", "manage-tasks", "manage-team", "manage-assets"},
    "team_member": {"manage-clients", "manage-projects", "manage-tasks", "manage-assets"},
    "client": set(),
}

ALL_CAPABILITIES = [c.value for c in Capability]


@pytest.mark.parametrize("role", sorted(EXPECTED))
@pytest.mark.parametrize("capability", ALL_CAPABILITIES)
def test_gate_matches_role_table(role, capability):
    assert is_allowed(role, capability) is (capability in EXPECTED[role])


def test_enum_members_are_accepted():
    assert is_allowed(UserRole.AGENCY_ADMIN, Capability.MANAGE_TEAM) is True
    assert is_allowed(UserRole.TEAM_MEMBER, Capability.MANAGE_TEAM) is False
    assert is_allowed(UserRole.CLIENT, Capability.MANAGE_CLIENTS) is False


@pytest.mark.parametrize("role", ["owner", "", "SUPER_ADMIN", "admin ", None, 42, ["agency_admin"], object()])
def test_unknown_roles_always_deny(role):
    for capability in ALL_CAPABILITIES:
        assert is_allowed(role, capability) is False


@pytest.mark.parametrize("capability", ["manage-billing", "", None, 3.5, Capability])
def test_unknown_capabilities_deny(capability):
    assert is_allowed("super_admin", capability) is False


def test_every_role_is_in_the_table():
    assert set(ROLE_CAPABILITIES) == {role.value for role in UserRole}


def test_require_capability_raises_for_denied_role():
    context = CallerContext(user_id="u-1", role="client", agency_id="a-1")
    with pytest.raises(PermissionDenied) as exc_info:
        require_capability(context, Capability.MANAGE_CLIENTS)
    assert exc_info.value.status_code == 403
    assert "manage-clients" in exc_info.value.detail


def test_require_capability_passes_for_allowed_role():
    context = CallerContext(user_id="u-1", role="team_member", agency_id="a-1")
    require_capability(context, Capability.MANAGE_TASKS)
