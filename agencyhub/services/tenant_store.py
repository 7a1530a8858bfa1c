"""
Tenant Store

CRUD for agencies, users and the agency-scoped business records.

Every record operation takes the agency id the call is scoped to and
filters on it, so a record from another agency behaves exactly like a
missing one: reads return None, updates and deletes raise NotFound.

Cross references (a project's client, a task's project/lead/client, the
user a record is assigned to, ...) are resolved inside the same agency
before anything is written; a reference that does not resolve is a
ValidationError and nothing is persisted.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agencyhub.core.exceptions import ConflictError, NotFound, ValidationError
from agencyhub.core.permissions import Capability
from agencyhub.core.security import get_password_hash
from agencyhub.models import Agency, Client, Contact, Lead, Project, Quote, Task, User, UserRole
from agencyhub.utils.logging import get_logger

logger = get_logger(__name__)

# Never settable through a payload
IMMUTABLE_FIELDS = frozenset({"id", "agency_id", "created_at", "updated_at"})

USER_FIELDS = frozenset({"email", "full_name", "role", "is_active", "password"})
AGENCY_FIELDS = frozenset({"name", "slug", "industry"})

VALID_ROLES = frozenset(role.value for role in UserRole)


@dataclass(frozen=True)
class EntityKind:
    """How one agency-scoped record type is validated and authorized."""
    name: str
    label: str
    model: type
    capability: Capability
    required: Tuple[str, ...]
    references: Dict[str, type] = field(default_factory=dict)

    @property
    def columns(self) -> frozenset:
        return frozenset(c.name for c in self.model.__table__.columns)


ENTITIES: Dict[str, EntityKind] = {
    "clients": EntityKind(
        "clients", "Client", Client, Capability.MANAGE_CLIENTS,
        required=("name",),
    ),
    "projects": EntityKind(
        "projects", "Project", Project, Capability.MANAGE_PROJECTS,
        required=("name",),
        references={"client_id": Client, "assigned_to": User, "created_by": User},
    ),
    "leads": EntityKind(
        "leads", "Lead", Lead, Capability.MANAGE_CLIENTS,
        required=("name", "source"),
        references={
            "assigned_to": User,
            "converted_to_client_id": Client,
            "converted_to_project_id": Project,
        },
    ),
    "quotes": EntityKind(
        "quotes", "Quote", Quote, Capability.MANAGE_CLIENTS,
        required=("client_id", "title"),
        references={"client_id": Client, "created_by": User},
    ),
    "tasks": EntityKind(
        "tasks", "Task", Task, Capability.MANAGE_TASKS,
        required=("title",),
        references={
            "project_id": Project,
            "lead_id": Lead,
            "client_id": Client,
            "assigned_to": User,
            "created_by": User,
        },
    ),
    "contacts": EntityKind(
        "contacts", "Contact", Contact, Capability.MANAGE_CLIENTS,
        required=("name",),
    ),
}


def get_entity_kind(entity: str) -> EntityKind:
    kind = ENTITIES.get(entity)
    if kind is None:
        raise ValidationError(f"Unknown entity type: {entity}")
    return kind


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class TenantStore:
    """
    Agency-scoped persistence on top of one SQLAlchemy session.

    Write methods commit by default; pass commit=False to group several
    writes into one transaction and call commit() afterwards.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # transaction helpers
    # ------------------------------------------------------------------

    def commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Change violates a database constraint") from exc

    def _persist(self, record, commit: bool) -> None:
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(f"{type(record).__name__} conflicts with an existing record") from exc
        if commit:
            self.commit()
            self.db.refresh(record)

    # ------------------------------------------------------------------
    # agencies
    # ------------------------------------------------------------------

    def get_agency(self, agency_id: Optional[str]) -> Optional[Agency]:
        if not agency_id:
            return None
        return self.db.get(Agency, agency_id)

    def list_agencies(self, limit: int = 100, offset: int = 0) -> Tuple[List[Agency], int]:
        total = self.db.scalar(select(func.count()).select_from(Agency))
        agencies = self.db.scalars(
            select(Agency).order_by(Agency.created_at.desc()).offset(offset).limit(limit)
        ).all()
        return list(agencies), total

    def create_agency(self, data: Dict[str, Any], commit: bool = True) -> Agency:
        data = self._check_fields("Agency", data, AGENCY_FIELDS)
        for name in ("name", "slug"):
            if _is_blank(data.get(name)):
                raise ValidationError(f"Agency.{name} is required")

        if self.db.scalar(select(Agency.id).where(Agency.slug == data["slug"])):
            raise ConflictError(f"Agency slug already taken: {data['slug']}")

        agency = Agency(**data)
        self._persist(agency, commit)
        logger.info(f"Agency created: {agency.id} ({agency.slug})")
        return agency

    def update_agency(self, agency_id: str, data: Dict[str, Any]) -> Agency:
        agency = self.get_agency(agency_id)
        if agency is None:
            raise NotFound("Agency", agency_id)

        data = self._check_fields("Agency", data, AGENCY_FIELDS)
        for name in ("name", "slug"):
            if name in data and _is_blank(data[name]):
                raise ValidationError(f"Agency.{name} cannot be empty")

        for name, value in data.items():
            setattr(agency, name, value)
        self.commit()
        self.db.refresh(agency)
        return agency

    def _require_agency(self, agency_id: Optional[str]) -> Agency:
        agency = self.get_agency(agency_id)
        if agency is None:
            raise ValidationError(f"Agency does not exist: {agency_id}")
        return agency

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    def list_users(
        self,
        agency_id: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[User], int]:
        query = select(User).where(User.agency_id == agency_id)
        query = self._apply_filters(query, User, filters)
        return self._paginate(query, User, limit, offset)

    def get_user(self, agency_id: str, user_id: str) -> Optional[User]:
        return self.db.scalar(
            select(User).where(User.id == user_id, User.agency_id == agency_id)
        )

    def get_user_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        return self.db.scalar(select(User).where(User.email == email.strip().lower()))

    def create_user(self, agency_id: Optional[str], data: Dict[str, Any], commit: bool = True) -> User:
        data = self._check_fields("User", data, USER_FIELDS)
        if _is_blank(data.get("email")):
            raise ValidationError("User.email is required")

        role = data.get("role") or UserRole.TEAM_MEMBER.value
        role = role.value if isinstance(role, UserRole) else role
        if role not in VALID_ROLES:
            raise ValidationError(f"Unknown role: {role}")

        if role != UserRole.SUPER_ADMIN.value or agency_id is not None:
            if agency_id is None:
                raise ValidationError(f"Role '{role}' requires an agency")
            self._require_agency(agency_id)

        email = data["email"].strip().lower()
        if self.get_user_by_email(email):
            raise ConflictError(f"Email already registered: {email}")

        password = data.pop("password", None)
        user = User(
            email=email,
            full_name=data.get("full_name"),
            role=role,
            agency_id=agency_id,
            is_active=data.get("is_active", True),
            hashed_password=get_password_hash(password) if password else None,
        )
        self._persist(user, commit)
        logger.info(f"User created: {user.id} role={role}", extra={"agency_id": agency_id})
        return user

    def update_user(self, agency_id: str, user_id: str, data: Dict[str, Any]) -> User:
        user = self.get_user(agency_id, user_id)
        if user is None:
            raise NotFound("User", user_id)

        data = self._check_fields("User", data, USER_FIELDS)

        if "role" in data:
            role = data["role"].value if isinstance(data["role"], UserRole) else data["role"]
            if role not in VALID_ROLES:
                raise ValidationError(f"Unknown role: {role}")
            data["role"] = role

        if "email" in data:
            if _is_blank(data["email"]):
                raise ValidationError("User.email cannot be empty")
            email = data["email"].strip().lower()
            existing = self.get_user_by_email(email)
            if existing is not None and existing.id != user.id:
                raise ConflictError(f"Email already registered: {email}")
            data["email"] = email

        password = data.pop("password", None)
        if password:
            user.hashed_password = get_password_hash(password)

        for name, value in data.items():
            setattr(user, name, value)
        self.commit()
        self.db.refresh(user)
        return user

    # ------------------------------------------------------------------
    # agency-scoped records
    # ------------------------------------------------------------------

    def list(
        self,
        entity: str,
        agency_id: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[Any], int]:
        kind = get_entity_kind(entity)
        query = select(kind.model).where(kind.model.agency_id == agency_id)
        query = self._apply_filters(query, kind.model, filters)
        return self._paginate(query, kind.model, limit, offset)

    def get(self, entity: str, agency_id: str, record_id: str) -> Optional[Any]:
        kind = get_entity_kind(entity)
        return self.db.scalar(
            select(kind.model).where(
                kind.model.id == record_id,
                kind.model.agency_id == agency_id,
            )
        )

    def create(self, entity: str, agency_id: str, data: Dict[str, Any]) -> Any:
        kind = get_entity_kind(entity)
        self._require_agency(agency_id)

        data = self._check_fields(kind.label, data, kind.columns - IMMUTABLE_FIELDS)
        missing = [name for name in kind.required if _is_blank(data.get(name))]
        if missing:
            raise ValidationError(f"{kind.label} is missing required fields: {', '.join(missing)}")

        self._check_references(kind, agency_id, data)

        record = kind.model(agency_id=agency_id, **data)
        self._persist(record, commit=True)
        logger.debug(f"{kind.label} created: {record.id}", extra={"agency_id": agency_id})
        return record

    def update(self, entity: str, agency_id: str, record_id: str, data: Dict[str, Any]) -> Any:
        kind = get_entity_kind(entity)
        record = self.get(entity, agency_id, record_id)
        if record is None:
            raise NotFound(kind.label, record_id)

        data = self._check_fields(kind.label, data, kind.columns - IMMUTABLE_FIELDS)
        cleared = [name for name in kind.required if name in data and _is_blank(data[name])]
        if cleared:
            raise ValidationError(f"{kind.label} fields cannot be empty: {', '.join(cleared)}")

        self._check_references(kind, agency_id, data)

        for name, value in data.items():
            setattr(record, name, value)
        self.commit()
        self.db.refresh(record)
        logger.debug(f"{kind.label} updated: {record.id}", extra={"agency_id": agency_id})
        return record

    def delete(self, entity: str, agency_id: str, record_id: str) -> None:
        kind = get_entity_kind(entity)
        record = self.get(entity, agency_id, record_id)
        if record is None:
            raise NotFound(kind.label, record_id)

        self.db.delete(record)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(f"{kind.label} {record_id} is still referenced by other records") from exc
        logger.debug(f"{kind.label} deleted: {record_id}", extra={"agency_id": agency_id})

    # ------------------------------------------------------------------
    # validation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_fields(label: str, data: Dict[str, Any], allowed: frozenset) -> Dict[str, Any]:
        data = dict(data or {})
        forbidden = sorted(IMMUTABLE_FIELDS.intersection(data))
        if forbidden:
            raise ValidationError(f"{label} fields cannot be set: {', '.join(forbidden)}")
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ValidationError(f"Unknown {label} fields: {', '.join(unknown)}")
        return data

    def _check_references(self, kind: EntityKind, agency_id: str, data: Dict[str, Any]) -> None:
        """Every non-null reference must name a record of the same agency."""
        for column, target in kind.references.items():
            value = data.get(column)
            if value is None:
                continue
            found = self.db.scalar(
                select(target.id).where(target.id == value, target.agency_id == agency_id)
            )
            if found is None:
                raise ValidationError(
                    f"{kind.label}.{column} does not reference a {target.__name__} of this agency"
                )

    @staticmethod
    def _apply_filters(query, model, filters: Optional[Dict[str, Any]]):
        if not filters:
            return query
        columns = model.__table__.columns
        for name, value in filters.items():
            if name not in columns:
                raise ValidationError(f"Cannot filter {model.__tablename__} by {name}")
            query = query.where(columns[name] == value)
        return query

    def _paginate(self, query, model, limit: int, offset: int) -> Tuple[List[Any], int]:
        total = self.db.scalar(select(func.count()).select_from(query.subquery()))
        records = self.db.scalars(
            query.order_by(model.created_at.desc()).offset(offset).limit(limit)
        ).all()
        return list(records), total
