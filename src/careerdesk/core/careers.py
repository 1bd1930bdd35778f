from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from careerdesk.core.capabilities import Principal
from careerdesk.core.errors import AuthorizationError, NotAuthenticated, NotFound, ValidationError
from careerdesk.core.notifications import NotificationEmitter
from careerdesk.db.models import ADMIN_OWNER_KEY, Application, Career, Employer
from careerdesk.db.repositories import Repository

logger = logging.getLogger(__name__)


def load_active_employer(repo: Repository, employer_id: int) -> Employer:
    """The acting employer row; archived, declined or pending accounts lose access mid-session."""
    employer = repo.get_employer(employer_id)
    if employer is None:
        raise NotAuthenticated("Not logged in")
    if employer.status != "ACCEPTED":
        raise AuthorizationError(f"Your account is {employer.status}. Access denied.")
    return employer


def owner_key_for(repo: Repository, principal: Principal | None) -> str:
    """Career owner key of the acting principal.

    Employers are always resolved from the numeric id held in the session, never
    from a handle the client sends.
    """
    if principal is None:
        raise NotAuthenticated("Not logged in")
    if principal.is_admin:
        return ADMIN_OWNER_KEY
    if principal.role != "employer":
        raise AuthorizationError("Forbidden: employer or admin capability required")
    return load_active_employer(repo, principal.subject_id).user_id


class CareerService:
    def __init__(self, session: Session, *, notifier: NotificationEmitter | None = None):
        self.session = session
        self.repo = Repository(session)
        self.notifier = notifier or NotificationEmitter(session)

    def post_career(self, principal: Principal | None, *, title: str, description: str = "", link: str = "") -> Career:
        owner_key = owner_key_for(self.repo, principal)
        title = (title or "").strip()
        if not title:
            raise ValidationError("title is required")

        career = self.repo.create_career(
            title=title,
            description=(description or "").strip(),
            link=(link or "").strip(),
            owner_key=owner_key,
        )
        logger.info("Career %s posted by %s", career.id, owner_key)
        self.notifier.emit(name="Careers", message=f"New career posted: {career.title}", link="/careers")
        return career

    def list_own(self, principal: Principal | None) -> list[Career]:
        return self.repo.list_careers_for_owner(owner_key_for(self.repo, principal))

    def delete_career(self, principal: Principal | None, career_id: int) -> int:
        career = self._owned_career(principal, career_id)
        removed = self.repo.delete_career(career.id)
        logger.info("Career %s deleted with %s live application(s); archive retained", career_id, removed)
        return removed

    def list_live_applications(self, principal: Principal | None, career_id: int) -> list[Application]:
        career = self._owned_career(principal, career_id)
        return self.repo.list_live_applications_for_career(career.id)

    def _owned_career(self, principal: Principal | None, career_id: int) -> Career:
        owner_key = owner_key_for(self.repo, principal)
        career = self.repo.get_career(career_id)
        if career is None:
            raise NotFound(f"Career {career_id} not found")
        if owner_key != ADMIN_OWNER_KEY and career.owner_key != owner_key:
            raise AuthorizationError("Forbidden: career belongs to another employer")
        return career
