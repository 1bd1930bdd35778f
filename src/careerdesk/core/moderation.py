"""Staged edits to moderated employer fields and the admin decisions on them.

Each field group (``profile``: landline, mobile, company email; ``logo``)
is either CLEAN, with every pending column null, or PROPOSED. Employers move a
group to PROPOSED; only an admin approve or reject returns it to CLEAN, and
that read-then-clear happens under a row lock in a single commit.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerdesk.config import Settings, get_settings
from careerdesk.core.capabilities import Principal, require_role
from careerdesk.core.errors import NotFound, StorageError, ValidationError
from careerdesk.core.files import FileStager
from careerdesk.core.notifications import NotificationEmitter
from careerdesk.db.models import Employer
from careerdesk.db.repositories import Repository
from careerdesk.types import MODERATED_FIELDS, SCOPE_FIELDS, EmployerChangeProposal

logger = logging.getLogger(__name__)

MODERATION_LINK = "/admin/moderation"


def _commit(session: Session, action: str, employer_id: int) -> None:
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to %s for employer_id=%s", action, employer_id)
        raise StorageError(f"{action} failed") from exc


def snapshot(employer: Employer) -> dict[str, Any]:
    return {
        "employer_id": employer.id,
        "user_id": employer.user_id,
        "display_name": employer.display_name,
        "status": employer.status,
        "profile_confirmed": employer.profile_confirmed,
        "live": {field: getattr(employer, live) for field, (live, _) in MODERATED_FIELDS.items()},
        "pending": {field: getattr(employer, pending) for field, (_, pending) in MODERATED_FIELDS.items()},
    }


class PendingFieldManager:
    def __init__(
        self,
        session: Session,
        *,
        files: FileStager | None = None,
        notifier: NotificationEmitter | None = None,
    ):
        self.session = session
        self.repo = Repository(session)
        self.files = files or FileStager()
        self.notifier = notifier or NotificationEmitter(session)

    def propose_change(self, employer_id: int, proposal: EmployerChangeProposal) -> dict[str, str]:
        staged = proposal.staged_values()
        if not staged:
            raise ValidationError("At least one of landline_no, mobile_no, company_email or logo is required")

        employer = self.repo.get_employer(employer_id, for_update=True)
        if employer is None:
            self.session.rollback()
            raise NotFound(f"Employer {employer_id} not found")

        replaced_logo = None
        for field, value in staged.items():
            _, pending_column = MODERATED_FIELDS[field]
            previous = getattr(employer, pending_column)
            if field == "logo" and previous and previous != value:
                replaced_logo = previous
            setattr(employer, pending_column, value)

        _commit(self.session, "stage profile changes", employer_id)
        logger.info("Staged %s for employer_id=%s", sorted(staged), employer_id)

        # The overwritten proposal was never approved, so nothing else references its file.
        self.files.discard(replaced_logo)
        self.notifier.emit(
            name="Employer Profile Changes",
            message=f"{employer.display_name} submitted changes for review: {', '.join(sorted(staged))}",
            link=MODERATION_LINK,
        )
        return staged

    def get_pending_and_live(self, employer_id: int) -> dict[str, Any]:
        employer = self.repo.get_employer(employer_id)
        if employer is None:
            raise NotFound(f"Employer {employer_id} not found")
        return snapshot(employer)

    def list_pending_changes(self) -> list[dict[str, Any]]:
        return [snapshot(employer) for employer in self.repo.list_employers_with_pending_changes()]


class ApprovalAuthority:
    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        files: FileStager | None = None,
        notifier: NotificationEmitter | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.files = files or FileStager(self.settings)
        self.notifier = notifier or NotificationEmitter(session)

    def approve(self, principal: Principal | None, employer_id: int, scope: str) -> dict[str, Any]:
        require_role(principal, "admin")
        fields = self._fields_for(scope)
        employer = self._lock_employer(employer_id)

        applied: list[str] = []
        previous_logo = employer.company_logo
        for field, (live_column, pending_column) in fields.items():
            value = getattr(employer, pending_column)
            if value is not None:
                setattr(employer, live_column, value)
                applied.append(field)
            setattr(employer, pending_column, None)

        _commit(self.session, f"approve {scope}", employer_id)

        if "logo" in applied and previous_logo != employer.company_logo:
            self.files.discard(previous_logo)
        if applied:
            logger.info("Approved %s for employer_id=%s by %s", applied, employer_id, principal.handle)
            self.notifier.emit(
                name="Employer Profile Changes",
                message=f"Approved {scope} changes for {employer.display_name}",
                link=MODERATION_LINK,
            )
        return {"employer_id": employer_id, "scope": scope, "applied": applied}

    def reject(self, principal: Principal | None, employer_id: int, scope: str) -> dict[str, Any]:
        require_role(principal, "admin")
        fields = self._fields_for(scope)
        employer = self._lock_employer(employer_id)

        discarded: dict[str, str] = {}
        for field, (_, pending_column) in fields.items():
            value = getattr(employer, pending_column)
            if value is not None:
                discarded[field] = value
            setattr(employer, pending_column, None)

        _commit(self.session, f"reject {scope}", employer_id)

        if "logo" in discarded:
            self.files.discard(discarded["logo"])
        if discarded:
            logger.info("Rejected %s for employer_id=%s by %s", sorted(discarded), employer_id, principal.handle)
            self.notifier.emit(
                name="Employer Profile Changes",
                message=f"Rejected {scope} changes for {employer.display_name}",
                link=MODERATION_LINK,
            )
        return {"employer_id": employer_id, "scope": scope, "discarded": sorted(discarded)}

    def _fields_for(self, scope: str) -> dict[str, tuple[str, str]]:
        fields = SCOPE_FIELDS.get(scope)
        if fields is None:
            raise ValidationError(f"scope must be one of {sorted(SCOPE_FIELDS)}")
        return fields

    def _lock_employer(self, employer_id: int) -> Employer:
        employer = self.repo.get_employer(employer_id, for_update=True)
        if employer is None:
            self.session.rollback()
            raise NotFound(f"Employer {employer_id} not found")
        return employer
