"""
Cascade Deletion Engine

Deletes a user and, when they were the last member of their agency, the
agency together with everything it owns.

Protocol, all inside one transaction:
1. Resolve the user by id or email.
2. Lock the agency row and count the other members.
3. Re-count right before deleting anything. A different number means a
   member was added or removed concurrently: the attempt is aborted.
4. Last member: delete tasks, quotes, projects, leads, contacts and
   clients of the agency, then the agency, then the user.
   Otherwise delete only the user.

An aborted attempt (re-check mismatch, or the database refusing a
delete because someone inserted a dependent row meanwhile) rolls back
completely and the protocol is run once more. If that attempt aborts as
well the caller gets a ConflictError. purge_agency() is retried the
same way.

Any other exception, including KeyboardInterrupt or a cancelled request,
leaves the transaction context and rolls everything back; there are no
partial cascades.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agencyhub.config import get_settings
from agencyhub.core.exceptions import ConflictError, NotFound, TransactionAborted
from agencyhub.models import Agency, Client, Contact, Lead, Project, Quote, Task, User
from agencyhub.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)

# Children before parents: tasks point at projects/leads/clients, quotes
# and projects at clients. Lead conversion links are ON DELETE SET NULL.
CASCADE_ORDER = (Task, Quote, Project, Lead, Contact, Client)

REPORT_TABLES = tuple(m.__tablename__ for m in CASCADE_ORDER) + ("agencies", "users")


@dataclass
class CascadeReport:
    """Outcome of a successful deletion."""
    user_id: Optional[str]
    email: Optional[str]
    agency_id: Optional[str]
    agency_deleted: bool
    deleted: Dict[str, int] = field(default_factory=lambda: dict.fromkeys(REPORT_TABLES, 0))
    attempts: int = 1

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted.values())


class CascadeDeletionEngine:

    def __init__(self, db: Session, max_attempts: Optional[int] = None):
        self.db = db
        self.max_attempts = max(1, max_attempts or get_settings().CASCADE_MAX_ATTEMPTS)

    # ------------------------------------------------------------------
    # public operations
    # ------------------------------------------------------------------

    def delete_user_and_maybe_agency(
        self,
        identifier: str,
        scope_agency_id: Optional[str] = None,
    ) -> CascadeReport:
        """
        Delete the user named by identifier (id or email).

        scope_agency_id restricts the lookup to one agency; users outside
        it are reported as NotFound.
        """
        if not identifier or not str(identifier).strip():
            raise NotFound("User")

        identifier = str(identifier).strip()
        report = self._attempt(
            f"Deleting user {identifier}",
            lambda: self._delete_user(identifier, scope_agency_id),
            scope_agency_id,
        )
        self._log_report(report)
        return report

    def purge_agency(self, agency_id: str) -> CascadeReport:
        """Delete an agency, all of its users and all of its records."""
        report = self._attempt(
            f"Purging agency {agency_id}",
            lambda: self._purge(agency_id),
            agency_id,
        )
        log_security_event(
            "agency_purged",
            {"agency_id": agency_id, "deleted": report.deleted},
            logger,
        )
        return report

    # ------------------------------------------------------------------
    # transaction steps
    # ------------------------------------------------------------------

    def _attempt(self, action: str, step, agency_id: Optional[str]) -> CascadeReport:
        """
        Run step in its own transaction, starting over after an abort.

        TransactionAborted never leaves this method: once max_attempts
        are used up it becomes a ConflictError.
        """
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                report = self._run(step)
            except TransactionAborted as exc:
                last_error = exc
                logger.warning(
                    f"{action} aborted: {exc.detail}",
                    extra={"attempt": attempt, "agency_id": agency_id},
                )
                continue

            report.attempts = attempt
            return report

        raise ConflictError(
            f"{action} kept conflicting with concurrent changes "
            f"({self.max_attempts} attempts): {last_error.detail}"
        ) from last_error

    def _run(self, step):
        # Start from a clean slate; whatever the session did before is
        # not part of this unit of work.
        if self.db.in_transaction():
            self.db.rollback()

        try:
            with self.db.begin():
                result = step()
        except IntegrityError as exc:
            raise TransactionAborted("Database rejected the cascade, agency changed concurrently") from exc

        # bulk deletes bypass the identity map; reload anything still held
        self.db.expire_all()
        return result

    def _delete_user(self, identifier: str, scope_agency_id: Optional[str]) -> CascadeReport:
        user = self._resolve_user(identifier, scope_agency_id)
        if user is None:
            raise NotFound("User", identifier)

        report = CascadeReport(
            user_id=user.id,
            email=user.email,
            agency_id=user.agency_id,
            agency_deleted=False,
        )

        if user.agency_id is None:
            report.deleted["users"] = self._delete_rows(User, User.id == user.id)
            return report

        agency_id = user.agency_id
        self._lock_agency(agency_id)
        others = self._count_other_members(agency_id, user.id)

        if self._count_other_members(agency_id, user.id) != others:
            raise TransactionAborted(f"Membership of agency {agency_id} changed during deletion")

        if others == 0:
            report.deleted.update(self._delete_agency_records(agency_id))
            # The user row still points at the agency; unlink it so the
            # agency row can go first.
            self.db.execute(
                update(User).where(User.id == user.id).values(agency_id=None)
                .execution_options(synchronize_session=False)
            )
            report.deleted["agencies"] = self._delete_rows(Agency, Agency.id == agency_id)
            report.agency_deleted = True

        report.deleted["users"] = self._delete_rows(User, User.id == user.id)
        return report

    def _purge(self, agency_id: str) -> CascadeReport:
        if self.db.get(Agency, agency_id) is None:
            raise NotFound("Agency", agency_id)

        self._lock_agency(agency_id)
        report = CascadeReport(user_id=None, email=None, agency_id=agency_id, agency_deleted=True)
        report.deleted.update(self._delete_agency_records(agency_id))
        report.deleted["users"] = self._delete_rows(User, User.agency_id == agency_id)
        report.deleted["agencies"] = self._delete_rows(Agency, Agency.id == agency_id)
        return report

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def _resolve_user(self, identifier: str, scope_agency_id: Optional[str]) -> Optional[User]:
        query = select(User).where(or_(User.id == identifier, User.email == identifier.lower()))
        if scope_agency_id is not None:
            query = query.where(User.agency_id == scope_agency_id)
        return self.db.scalar(query)

    def _lock_agency(self, agency_id: str) -> None:
        # FOR UPDATE is dropped by dialects without row locks (SQLite)
        self.db.execute(select(Agency.id).where(Agency.id == agency_id).with_for_update())

    def _count_other_members(self, agency_id: str, user_id: str) -> int:
        return self.db.scalar(
            select(func.count()).select_from(User).where(
                User.agency_id == agency_id,
                User.id != user_id,
            )
        )

    def _delete_agency_records(self, agency_id: str) -> Dict[str, int]:
        counts = {}
        for model in CASCADE_ORDER:
            counts[model.__tablename__] = self._delete_rows(model, model.agency_id == agency_id)
        return counts

    def _delete_rows(self, model, condition) -> int:
        result = self.db.execute(
            delete(model).where(condition).execution_options(synchronize_session=False)
        )
        return result.rowcount

    def _log_report(self, report: CascadeReport) -> None:
        extra = {"agency_id": report.agency_id, "user_id": report.user_id, "deleted": report.deleted}
        if report.agency_deleted:
            log_security_event("cascade_delete", extra, logger)
        else:
            logger.info(f"User deleted: {report.user_id}", extra=extra)
