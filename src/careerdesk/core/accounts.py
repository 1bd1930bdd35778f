from __future__ import annotations

import logging

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careerdesk.config import Settings, get_settings
from careerdesk.core.capabilities import Principal, require_role
from careerdesk.core.errors import AuthorizationError, ConflictError, NotAuthenticated, NotFound, ValidationError
from careerdesk.core.mailer import Mailer
from careerdesk.core.notifications import NotificationEmitter
from careerdesk.core.otp import OneTimeCodes
from careerdesk.db.models import ADMIN_OWNER_KEY, EMPLOYER_STATUSES, AlumniAccount, Employer
from careerdesk.db.repositories import Repository
from careerdesk.types import AlumniRegistration, EmployerRegistration

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def reset_code_key(role: str, user_key: str) -> str:
    """Alumni usernames and employer handles share no namespace, so codes are keyed per role."""
    return f"{role}:{user_key.strip().lower()}"


class AccountService:
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

    # registration

    def register_employer(self, payload: EmployerRegistration) -> Employer:
        if payload.user_id.lower() == ADMIN_OWNER_KEY or self.repo.get_employer_by_handle(payload.user_id):
            raise ConflictError("Preferred User ID is already taken. Please choose another.")

        values = payload.model_dump(exclude={"password"})
        values.update(
            password_hash=hash_password(payload.password),
            status="PENDING",
            company_logo=self.settings.default_logo_path,
        )
        try:
            employer = self.repo.create_employer(values)
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("Preferred User ID is already taken. Please choose another.") from exc

        logger.info("Employer registered employer_id=%s handle=%s", employer.id, employer.user_id)
        self.notifier.emit(
            name="Employer Registrations",
            message=f"New employer registration received from {employer.employer_name}",
            link="/admin/employers",
        )
        return employer

    def register_alumni(self, payload: AlumniRegistration) -> AlumniAccount:
        if self.repo.get_alumni_by_name(payload.user_name):
            raise ConflictError("Username already taken. Please choose another.")

        values = payload.model_dump(exclude={"password"})
        values["password_hash"] = hash_password(payload.password)
        try:
            account = self.repo.create_alumni(values)
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("Username already taken. Please choose another.") from exc

        self.notifier.emit(
            name="Alumni Registrations",
            message=f"{account.first_name} {account.last_name} created an account.",
            link="/admin/alumni",
        )
        return account

    def ensure_admin(self, user_name: str, password: str) -> bool:
        if self.repo.get_admin_by_name(user_name):
            return False
        if len(password) < 8:
            raise ValidationError("admin password must be at least 8 characters")
        self.repo.create_admin(user_name, hash_password(password))
        logger.info("Admin account %s created", user_name)
        return True

    # sessions

    def authenticate_admin(self, user_name: str, password: str) -> Principal:
        admin = self.repo.get_admin_by_name(user_name)
        if admin is None or not verify_password(password, admin.password_hash):
            raise NotAuthenticated("Invalid username or password")
        return Principal(role="admin", subject_id=admin.id, handle=admin.user_name)

    def authenticate_employer(self, user_id: str, password: str) -> Principal:
        employer = self.repo.get_employer_by_handle(user_id)
        if employer is None or not verify_password(password, employer.password_hash):
            raise NotAuthenticated("Invalid User ID or Password")
        if employer.status != "ACCEPTED":
            logger.info("Employer login refused handle=%s status=%s", employer.user_id, employer.status)
            raise AuthorizationError(f"Your account is {employer.status}. Access denied.")
        return Principal(role="employer", subject_id=employer.id, handle=employer.user_id)

    def authenticate_alumni(self, user_name: str, password: str) -> Principal:
        account = self.repo.get_alumni_by_name(user_name)
        if account is None or not verify_password(password, account.password_hash):
            raise NotAuthenticated("Invalid username or password")
        return Principal(role="alumni", subject_id=account.id, handle=account.user_name)

    # employer lifecycle

    def set_employer_status(self, principal: Principal | None, employer_id: int, status: str) -> Employer:
        require_role(principal, "admin")
        status = (status or "").upper()
        if status not in EMPLOYER_STATUSES:
            raise ValidationError(f"status must be one of {list(EMPLOYER_STATUSES)}")
        if self.repo.get_employer(employer_id) is None:
            raise NotFound(f"Employer {employer_id} not found")

        employer = self.repo.set_employer_status(employer_id, status)
        logger.info("Employer %s status set to %s by %s", employer_id, status, principal.handle)
        return employer

    def delete_employer(self, principal: Principal | None, employer_id: int) -> Employer:
        """Retire an employer account.

        The row is kept as ARCHIVED: careers and archived applications are keyed by
        the handle, so the handle must never become available to a new account.
        """
        require_role(principal, "admin")
        employer = self.repo.get_employer(employer_id)
        if employer is None:
            raise NotFound(f"Employer {employer_id} not found")
        if employer.status != "ARCHIVED":
            employer = self.repo.set_employer_status(employer_id, "ARCHIVED")
            logger.info("Employer %s archived by %s", employer_id, principal.handle)
        return employer

    def confirm_employer_profile(self, employer_id: int) -> bool:
        """Lock the profile. Returns False when it was already confirmed."""
        employer = self.repo.get_employer(employer_id)
        if employer is None:
            raise NotFound(f"Employer {employer_id} not found")
        if employer.profile_confirmed:
            return False
        if not employer.company_logo or employer.company_logo == self.settings.default_logo_path:
            raise ValidationError("An approved company logo is required before confirming the profile")

        employer.profile_confirmed = True
        self.session.commit()
        return True

    # password reset

    def _reset_target(self, role: str, user_key: str) -> AlumniAccount | Employer:
        if role == "alumni":
            account = self.repo.get_alumni_by_name(user_key)
        elif role == "employer":
            account = self.repo.get_employer_by_handle(user_key)
        else:
            raise ValidationError("role must be one of ['employer', 'alumni']")
        if account is None:
            raise NotFound("User not found")
        return account

    def send_reset_code(self, role: str, user_key: str, *, codes: OneTimeCodes, mailer: Mailer) -> str:
        """Issue and mail a one-time code; returns the address it went to."""
        user_key = (user_key or "").strip()
        if not user_key:
            raise ValidationError("Username or User ID is required")

        account = self._reset_target(role, user_key)
        email = account.personal_email if isinstance(account, AlumniAccount) else account.company_email
        if not email:
            raise ValidationError("No email address on file for this account")

        code = codes.issue(reset_code_key(role, user_key))
        mailer.send(
            to=email,
            subject=f"{self.settings.app_name} password reset code",
            body=f"Your one-time code is {code}. It expires in {self.settings.otp_expire_minutes} minutes.",
        )
        return email

    def reset_password(self, role: str, user_key: str, code: str, new_password: str, *, codes: OneTimeCodes) -> str:
        if len(new_password or "") < 8:
            raise ValidationError("password must be at least 8 characters")
        user_key = (user_key or "").strip()
        account = self._reset_target(role, user_key)

        codes.redeem(reset_code_key(role, user_key), code)
        account.password_hash = hash_password(new_password)
        self.session.commit()
        logger.info("Password reset for %s %s", role, user_key)
        return role
