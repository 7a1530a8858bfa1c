"""
Data-Access API

The boundary the HTTP layer calls into. Every method receives the
caller's context explicitly, runs the authorization gate before any side
effect of a mutation, works out which agency the call is scoped to and
hands over to the tenant store or the cascade engine.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from agencyhub.core.context import CallerContext, resolve_agency_id
from agencyhub.core.exceptions import AgencyHubError, AuthenticationError, NotFound, PermissionDenied
from agencyhub.core.permissions import Capability, require_capability
from agencyhub.core.security import verify_password
from agencyhub.models import Agency, User, UserRole
from agencyhub.services.cascade import CascadeDeletionEngine, CascadeReport
from agencyhub.services.tenant_store import TenantStore, get_entity_kind
from agencyhub.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)

USERS = "users"

# Fields a user may change on their own row without manage-team
SELF_SERVICE_FIELDS = frozenset({"email", "full_name", "password"})


class DataAccessAPI:

    def __init__(self, db: Session):
        self.db = db
        self.store = TenantStore(db)
        self.cascade = CascadeDeletionEngine(db)

    # ------------------------------------------------------------------
    # generic entity operations
    # ------------------------------------------------------------------

    def list(
        self,
        context: CallerContext,
        entity: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
        target_agency_id: Optional[str] = None,
    ) -> Tuple[List[Any], int]:
        if entity != USERS:
            get_entity_kind(entity)
        agency_id = resolve_agency_id(context, target_agency_id)

        if entity == USERS:
            return self.store.list_users(agency_id, filters, limit, offset)
        return self.store.list(entity, agency_id, filters, limit, offset)

    def get(
        self,
        context: CallerContext,
        entity: str,
        record_id: str,
        target_agency_id: Optional[str] = None,
    ) -> Optional[Any]:
        """Return the record, or None when it is absent or owned by another agency."""
        if entity != USERS:
            get_entity_kind(entity)
        agency_id = resolve_agency_id(context, target_agency_id)

        if entity == USERS:
            return self.store.get_user(agency_id, record_id)
        return self.store.get(entity, agency_id, record_id)

    def create(
        self,
        context: CallerContext,
        entity: str,
        data: Dict[str, Any],
        target_agency_id: Optional[str] = None,
    ) -> Any:
        if entity == USERS:
            return self._create_user(context, data, target_agency_id)

        kind = get_entity_kind(entity)
        require_capability(context, kind.capability)
        agency_id = resolve_agency_id(context, target_agency_id)

        data = dict(data)
        # Members are recorded as author; a super_admin acting on another
        # agency is not one of its users.
        if "created_by" in kind.columns and data.get("created_by") is None and context.agency_id == agency_id:
            data["created_by"] = context.user_id

        return self.store.create(entity, agency_id, data)

    def update(
        self,
        context: CallerContext,
        entity: str,
        record_id: str,
        data: Dict[str, Any],
        target_agency_id: Optional[str] = None,
    ) -> Any:
        if entity == USERS:
            return self._update_user(context, record_id, data, target_agency_id)

        kind = get_entity_kind(entity)
        require_capability(context, kind.capability)
        agency_id = resolve_agency_id(context, target_agency_id)
        return self.store.update(entity, agency_id, record_id, data)

    def delete(
        self,
        context: CallerContext,
        entity: str,
        record_id: str,
        target_agency_id: Optional[str] = None,
    ) -> Optional[CascadeReport]:
        """
        Delete one record.

        Deleting a user goes through the cascade protocol and returns its
        report; other entity types return None.
        """
        if entity == USERS:
            return self.delete_user_and_maybe_agency(context, record_id, target_agency_id)

        kind = get_entity_kind(entity)
        require_capability(context, kind.capability)
        agency_id = resolve_agency_id(context, target_agency_id)
        self.store.delete(entity, agency_id, record_id)
        return None

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    def _create_user(self, context: CallerContext, data: Dict[str, Any], target_agency_id: Optional[str]) -> User:
        require_capability(context, Capability.MANAGE_TEAM)

        role = data.get("role") or UserRole.TEAM_MEMBER.value
        if role == UserRole.SUPER_ADMIN.value:
            if not context.is_super_admin:
                raise PermissionDenied("Only a super_admin can create another super_admin")
            # super_admins normally live outside any agency
            agency_id = target_agency_id
        else:
            agency_id = resolve_agency_id(context, target_agency_id)

        return self.store.create_user(agency_id, data)

    def _update_user(
        self,
        context: CallerContext,
        user_id: str,
        data: Dict[str, Any],
        target_agency_id: Optional[str],
    ) -> User:
        """
        Update a user of the agency.

        Users may change their own email, full name and password without
        manage-team, whatever their role, so the gate is skipped for exactly
        that case. Everything else, role and activation included, passes the
        gate first.
        """
        is_self = user_id == context.user_id
        if not (is_self and SELF_SERVICE_FIELDS.issuperset(data)):
            require_capability(context, Capability.MANAGE_TEAM)

        if data.get("role") == UserRole.SUPER_ADMIN.value and not context.is_super_admin:
            raise PermissionDenied("Only a super_admin can grant the super_admin role")

        if is_self and context.agency_id is None:
            # super_admin editing their own agency-less row
            return self.store.update_user(None, user_id, data)

        agency_id = resolve_agency_id(context, target_agency_id)
        return self.store.update_user(agency_id, user_id, data)

    def delete_user_and_maybe_agency(
        self,
        context: CallerContext,
        identifier: str,
        target_agency_id: Optional[str] = None,
    ) -> CascadeReport:
        """
        Delete a user by id or email; the agency goes with its last member.

        A super_admin may leave out the target agency since identifiers
        are globally unique. Everyone else is limited to their own agency.
        """
        require_capability(context, Capability.MANAGE_TEAM)

        if context.is_super_admin:
            scope = target_agency_id
        else:
            scope = resolve_agency_id(context, target_agency_id)

        return self.cascade.delete_user_and_maybe_agency(identifier, scope_agency_id=scope)

    # ------------------------------------------------------------------
    # agencies
    # ------------------------------------------------------------------

    def get_agency(self, context: CallerContext, target_agency_id: Optional[str] = None) -> Agency:
        agency_id = resolve_agency_id(context, target_agency_id)
        agency = self.store.get_agency(agency_id)
        if agency is None:
            raise NotFound("Agency", agency_id)
        return agency

    def update_agency(
        self,
        context: CallerContext,
        data: Dict[str, Any],
        target_agency_id: Optional[str] = None,
    ) -> Agency:
        require_capability(context, Capability.MANAGE_TEAM)
        agency_id = resolve_agency_id(context, target_agency_id)
        return self.store.update_agency(agency_id, data)

    def list_agencies(self, context: CallerContext, limit: int = 100, offset: int = 0) -> Tuple[List[Agency], int]:
        self._require_super_admin(context)
        return self.store.list_agencies(limit, offset)

    def purge_agency(self, context: CallerContext, agency_id: str) -> CascadeReport:
        require_capability(context, Capability.MANAGE_TEAM)
        self._require_super_admin(context)
        return self.cascade.purge_agency(agency_id)

    @staticmethod
    def _require_super_admin(context: CallerContext) -> None:
        if not context.is_super_admin:
            raise PermissionDenied("super_admin role required")

    # ------------------------------------------------------------------
    # signup / login
    # ------------------------------------------------------------------

    def register_agency(self, agency_data: Dict[str, Any], admin_data: Dict[str, Any]) -> Tuple[Agency, User]:
        """
        Create an agency together with its first agency_admin.

        Both rows are written in one transaction, so a rejected admin
        (duplicate email, say) never leaves an empty agency behind.
        """
        admin_data = dict(admin_data, role=UserRole.AGENCY_ADMIN.value)
        try:
            agency = self.store.create_agency(agency_data, commit=False)
            user = self.store.create_user(agency.id, admin_data, commit=False)
            self.store.commit()
        except AgencyHubError:
            self.db.rollback()
            raise

        logger.info(f"Agency registered: {agency.slug}", extra={"agency_id": agency.id, "user_id": user.id})
        return agency, user

    def authenticate(self, email: str, password: str) -> User:
        user = self.store.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            log_security_event("failed_login", {"email": email}, logger)
            raise AuthenticationError("Incorrect email or password")

        if not user.is_active:
            log_security_event("failed_login", {"user_id": user.id, "reason": "inactive"}, logger)
            raise AuthenticationError("User account is disabled")

        return user
