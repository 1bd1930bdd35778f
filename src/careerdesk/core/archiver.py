from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerdesk.config import Settings, get_settings
from careerdesk.core.errors import NotFound, StorageError, ValidationError
from careerdesk.core.notifications import NotificationEmitter
from careerdesk.db.base import utcnow
from careerdesk.db.models import ADMIN_OWNER_KEY, ApplicantRecord, Career
from careerdesk.db.repositories import Repository
from careerdesk.types import ApplicantFields

logger = logging.getLogger(__name__)


class ApplicationArchiver:
    """Writes each application together with its archive snapshot, or neither."""

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        notifier: NotificationEmitter | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.notifier = notifier or NotificationEmitter(session)

    def submit_application(self, applicant: ApplicantFields, career_id: int, resume_ref: str) -> ApplicantRecord:
        missing = applicant.missing_fields()
        if not (resume_ref or "").strip():
            missing.append("resume")
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        if self.repo.get_career(career_id) is None:
            raise NotFound(f"Career {career_id} not found")

        submitted_at = utcnow()
        try:
            application = self.repo.add_application(
                {
                    **applicant.model_dump(),
                    "career_id": career_id,
                    "resume_path": resume_ref,
                    "date_submitted": submitted_at,
                }
            )

            career = self.repo.get_career(career_id)
            if career is None:
                self.session.rollback()
                raise NotFound(f"Career {career_id} not found")

            record = self.repo.add_applicant_record(
                {
                    **applicant.model_dump(),
                    "original_app_id": application.id,
                    "career_id": career.id,
                    "resume_path": resume_ref,
                    "career_title": career.title,
                    "company_name": self._company_name(career),
                    "employer_id": career.owner_key,
                    "date_submitted": submitted_at,
                }
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Application submission rolled back career_id=%s", career_id)
            raise StorageError("application submission failed") from exc

        logger.info(
            "Application %s archived as %s for employer=%s",
            record.original_app_id,
            record.id,
            record.employer_id,
        )
        self.notifier.emit(
            name="Job Applications",
            message=f"{applicant.first_name} {applicant.last_name} applied for {record.career_title}",
            link="/admin/applications",
        )
        return record

    def list_applications_for_employer(self, owner_key: str) -> list[ApplicantRecord]:
        if not owner_key:
            raise ValidationError("employer key is required")
        return self.repo.list_applicant_records_for_employer(owner_key)

    def list_applications_for_applicant(self, user_name: str) -> list[ApplicantRecord]:
        if not (user_name or "").strip():
            raise ValidationError("username is required")
        return self.repo.list_applicant_records_for_user(user_name.strip())

    def _company_name(self, career: Career) -> str:
        if career.owner_key == ADMIN_OWNER_KEY:
            return self.settings.app_name
        employer = self.repo.get_employer_by_handle(career.owner_key)
        return employer.display_name if employer else ""
