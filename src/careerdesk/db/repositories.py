from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from careerdesk.core.pagination import Page, PageRequest, paginate, search_clause
from careerdesk.db.models import (
    AdminAccount,
    AlumniAccount,
    ApplicantRecord,
    Application,
    Career,
    Employer,
    Notification,
)

PENDING_COLUMNS = (
    "pending_company_email",
    "pending_landline_no",
    "pending_mobile_no",
    "pending_company_logo",
)


class Repository:
    def __init__(self, session: Session):
        self.session = session

    # accounts

    def create_admin(self, user_name: str, password_hash: str) -> AdminAccount:
        admin = AdminAccount(user_name=user_name, password_hash=password_hash)
        self.session.add(admin)
        self.session.commit()
        self.session.refresh(admin)
        return admin

    def get_admin_by_name(self, user_name: str) -> AdminAccount | None:
        return self.session.scalar(select(AdminAccount).where(AdminAccount.user_name == user_name))

    def create_alumni(self, values: dict) -> AlumniAccount:
        account = AlumniAccount(**values)
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
        return account

    def get_alumni_by_name(self, user_name: str) -> AlumniAccount | None:
        return self.session.scalar(
            select(AlumniAccount).where(func.lower(AlumniAccount.user_name) == user_name.lower())
        )

    # employers

    def create_employer(self, values: dict) -> Employer:
        employer = Employer(**values)
        self.session.add(employer)
        self.session.commit()
        self.session.refresh(employer)
        return employer

    def get_employer(self, employer_id: int, *, for_update: bool = False) -> Employer | None:
        if not for_update:
            return self.session.get(Employer, employer_id)
        statement = (
            select(Employer)
            .where(Employer.id == employer_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.scalar(statement)

    def get_employer_by_handle(self, user_id: str) -> Employer | None:
        return self.session.scalar(select(Employer).where(func.lower(Employer.user_id) == user_id.lower()))

    def list_employers(self, request: PageRequest) -> Page[Employer]:
        statement = select(Employer).order_by(Employer.submitted_at.desc(), Employer.id.desc())
        clause = search_clause([Employer.employer_name, Employer.business_name, Employer.user_id], request.search)
        if clause is not None:
            statement = statement.where(clause)
        return paginate(self.session, statement, request)

    def list_employers_with_pending_changes(self) -> list[Employer]:
        conditions = [getattr(Employer, column).is_not(None) for column in PENDING_COLUMNS]
        statement = select(Employer).where(or_(*conditions)).order_by(Employer.updated_at.desc(), Employer.id.desc())
        return list(self.session.scalars(statement).all())

    def count_employers_by_status(self, status: str) -> int:
        return self.session.scalar(select(func.count(Employer.id)).where(Employer.status == status)) or 0

    def set_employer_status(self, employer_id: int, status: str) -> Employer:
        employer = self.session.get(Employer, employer_id)
        if not employer:
            raise ValueError(f"employer {employer_id} not found")
        employer.status = status
        self.session.commit()
        self.session.refresh(employer)
        return employer

    # careers

    def create_career(self, *, title: str, description: str, link: str, owner_key: str) -> Career:
        career = Career(title=title, description=description, link=link, owner_key=owner_key)
        self.session.add(career)
        self.session.commit()
        self.session.refresh(career)
        return career

    def get_career(self, career_id: int) -> Career | None:
        return self.session.get(Career, career_id)

    def list_careers_for_owner(self, owner_key: str) -> list[Career]:
        statement = (
            select(Career)
            .where(Career.owner_key == owner_key)
            .order_by(Career.date_posted.desc(), Career.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def list_public_careers(self, request: PageRequest) -> Page[Career]:
        statement = select(Career).order_by(Career.date_posted.desc(), Career.id.desc())
        clause = search_clause([Career.title, Career.description], request.search)
        if clause is not None:
            statement = statement.where(clause)
        return paginate(self.session, statement, request)

    def delete_career(self, career_id: int) -> int:
        """Delete a career and its live applications; returns how many applications went with it."""
        removed = self.session.execute(delete(Application).where(Application.career_id == career_id))
        self.session.execute(delete(Career).where(Career.id == career_id))
        self.session.commit()
        return removed.rowcount

    # applications (flush only: callers own the transaction)

    def add_application(self, values: dict) -> Application:
        application = Application(**values)
        self.session.add(application)
        self.session.flush()
        return application

    def add_applicant_record(self, values: dict) -> ApplicantRecord:
        record = ApplicantRecord(**values)
        self.session.add(record)
        self.session.flush()
        return record

    def get_application(self, application_id: int) -> Application | None:
        return self.session.get(Application, application_id)

    def delete_application(self, application_id: int) -> bool:
        result = self.session.execute(delete(Application).where(Application.id == application_id))
        self.session.commit()
        return result.rowcount > 0

    def list_live_applications_for_career(self, career_id: int) -> list[Application]:
        statement = (
            select(Application)
            .where(Application.career_id == career_id)
            .order_by(Application.date_submitted.desc(), Application.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_applicant_record_for(self, application_id: int) -> ApplicantRecord | None:
        return self.session.scalar(select(ApplicantRecord).where(ApplicantRecord.original_app_id == application_id))

    def list_applicant_records_for_employer(self, owner_key: str) -> list[ApplicantRecord]:
        statement = (
            select(ApplicantRecord)
            .where(ApplicantRecord.employer_id == owner_key)
            .order_by(ApplicantRecord.date_submitted.desc(), ApplicantRecord.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def list_applicant_records_for_user(self, user_name: str) -> list[ApplicantRecord]:
        statement = (
            select(ApplicantRecord)
            .where(ApplicantRecord.user_name == user_name)
            .order_by(ApplicantRecord.date_submitted.desc(), ApplicantRecord.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def list_applicant_records(self, request: PageRequest) -> Page[ApplicantRecord]:
        statement = select(ApplicantRecord).order_by(
            ApplicantRecord.date_submitted.desc(), ApplicantRecord.id.desc()
        )
        clause = search_clause(
            [
                ApplicantRecord.first_name,
                ApplicantRecord.last_name,
                ApplicantRecord.email,
                ApplicantRecord.career_title,
                ApplicantRecord.company_name,
            ],
            request.search,
        )
        if clause is not None:
            statement = statement.where(clause)
        return paginate(self.session, statement, request)

    # notifications

    def add_notification(self, *, name: str, message: str, link: str, created_at: datetime | None = None) -> Notification:
        notification = Notification(name=name, message=message, link=link)
        if created_at is not None:
            notification.created_at = created_at
        self.session.add(notification)
        self.session.commit()
        self.session.refresh(notification)
        return notification

    def list_notifications(self, request: PageRequest) -> Page[Notification]:
        statement = select(Notification).order_by(Notification.created_at.desc(), Notification.id.desc())
        clause = search_clause([Notification.name, Notification.message], request.search)
        if clause is not None:
            statement = statement.where(clause)
        return paginate(self.session, statement, request)

    def list_recent_notifications(self, limit: int = 50) -> list[Notification]:
        statement = select(Notification).order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
        return list(self.session.scalars(statement).all())

    def delete_notification(self, notification_id: int) -> bool:
        result = self.session.execute(delete(Notification).where(Notification.id == notification_id))
        self.session.commit()
        return result.rowcount > 0

    def clear_notifications(self) -> int:
        result = self.session.execute(delete(Notification))
        self.session.commit()
        return result.rowcount
