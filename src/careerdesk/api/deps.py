from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from careerdesk.core.capabilities import Principal, require_role
from careerdesk.core.careers import load_active_employer
from careerdesk.core.files import FileStager
from careerdesk.core.mailer import Mailer, SmtpMailer
from careerdesk.core.otp import OneTimeCodes
from careerdesk.core.runtime import get_one_time_codes
from careerdesk.db.repositories import Repository
from careerdesk.db.session import get_db_session

PRINCIPAL_SESSION_KEY = "principal"


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_principal(request: Request) -> Principal | None:
    return Principal.from_session(request.session.get(PRINCIPAL_SESSION_KEY))


def require_admin(principal: Principal | None = Depends(get_principal)) -> Principal:
    return require_role(principal, "admin")


def require_employer(
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Principal:
    require_role(principal, "employer")
    load_active_employer(Repository(db), principal.subject_id)
    return principal


def require_alumni(principal: Principal | None = Depends(get_principal)) -> Principal:
    return require_role(principal, "alumni")


def get_file_stager() -> FileStager:
    return FileStager()


def get_mailer() -> Mailer:
    return SmtpMailer()


def get_codes() -> OneTimeCodes:
    return get_one_time_codes()
