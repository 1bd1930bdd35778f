from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from careerdesk.api.deps import (
    PRINCIPAL_SESSION_KEY,
    get_codes,
    get_db,
    get_file_stager,
    get_mailer,
    get_principal,
    require_alumni,
    require_employer,
)
from careerdesk.api.schemas import (
    ApplicantRecordListResponse,
    ApplicantRecordResponse,
    CareerDeleteResponse,
    CareerEnvelope,
    CareerListResponse,
    CareerPageResponse,
    CareerRequest,
    CareerResponse,
    EmployerEnvelope,
    EmployerResponse,
    LiveApplicationListResponse,
    LiveApplicationResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PendingStateResponse,
    ProposalRequest,
    ProposalResponse,
    RegistrationResponse,
    ResetPasswordRequest,
    SendCodeRequest,
    SendCodeResponse,
    SubmissionResponse,
    VerifyCodeRequest,
    page_payload,
)
from careerdesk.core.accounts import AccountService, reset_code_key
from careerdesk.core.archiver import ApplicationArchiver
from careerdesk.core.capabilities import Principal
from careerdesk.core.careers import CareerService, owner_key_for
from careerdesk.core.errors import NotAuthenticated, NotFound, PortalError, ValidationError
from careerdesk.core.files import LOGO_NAMESPACE, RESUME_NAMESPACE, FileStager
from careerdesk.core.mailer import Mailer
from careerdesk.core.moderation import PendingFieldManager
from careerdesk.core.otp import OneTimeCodes
from careerdesk.core.pagination import build_page_request
from careerdesk.db.repositories import Repository
from careerdesk.types import AlumniRegistration, ApplicantFields, EmployerChangeProposal, EmployerRegistration

router = APIRouter(prefix="/api", tags=["api"])


def _mask_email(email: str) -> str:
    local, _, domain = email.partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"


# sessions


@router.post("/session/{role}", response_model=LoginResponse)
def login(role: str, payload: LoginRequest, request: Request, db: Session = Depends(get_db)) -> LoginResponse:
    service = AccountService(db)
    authenticators = {
        "admin": service.authenticate_admin,
        "employer": service.authenticate_employer,
        "alumni": service.authenticate_alumni,
    }
    authenticate = authenticators.get(role)
    if authenticate is None:
        raise NotFound(f"Unknown role '{role}'")

    principal = authenticate(payload.username.strip(), payload.password)
    request.session.clear()
    request.session[PRINCIPAL_SESSION_KEY] = principal.to_session()
    return LoginResponse(role=principal.role, handle=principal.handle, message="Login successful")


@router.delete("/session", response_model=MessageResponse)
def logout(request: Request) -> MessageResponse:
    request.session.clear()
    return MessageResponse(message="Signed out")


@router.get("/session", response_model=LoginResponse)
def whoami(principal: Principal | None = Depends(get_principal)) -> LoginResponse:
    if principal is None:
        raise NotAuthenticated("Not logged in")
    return LoginResponse(role=principal.role, handle=principal.handle)


# registration


@router.post("/employers/register", response_model=RegistrationResponse)
def register_employer(payload: EmployerRegistration, db: Session = Depends(get_db)) -> RegistrationResponse:
    employer = AccountService(db).register_employer(payload)
    return RegistrationResponse(id=employer.id, message="Employer registered successfully.")


@router.post("/alumni/register", response_model=RegistrationResponse)
def register_alumni(payload: AlumniRegistration, db: Session = Depends(get_db)) -> RegistrationResponse:
    account = AccountService(db).register_alumni(payload)
    return RegistrationResponse(id=account.id, message="Account created.")


# employer self-service


@router.get("/employers/me", response_model=EmployerEnvelope)
def get_own_employer(
    principal: Principal = Depends(require_employer),
    db: Session = Depends(get_db),
) -> EmployerEnvelope:
    employer = Repository(db).get_employer(principal.subject_id)
    if employer is None:
        raise NotFound("Employer not found")
    return EmployerEnvelope(employer=EmployerResponse.model_validate(employer))


@router.get("/employers/me/pending", response_model=PendingStateResponse)
def get_own_pending_state(
    principal: Principal = Depends(require_employer),
    db: Session = Depends(get_db),
) -> PendingStateResponse:
    return PendingStateResponse(**PendingFieldManager(db).get_pending_and_live(principal.subject_id))


@router.post("/employers/me/changes", response_model=ProposalResponse)
def propose_profile_change(
    payload: ProposalRequest,
    principal: Principal = Depends(require_employer),
    db: Session = Depends(get_db),
) -> ProposalResponse:
    try:
        proposal = EmployerChangeProposal(**payload.model_dump())
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    staged = PendingFieldManager(db).propose_change(principal.subject_id, proposal)
    return ProposalResponse(staged=staged)


@router.post("/employers/me/logo", response_model=ProposalResponse)
def propose_logo(
    logo: UploadFile = File(...),
    principal: Principal = Depends(require_employer),
    db: Session = Depends(get_db),
    files: FileStager = Depends(get_file_stager),
) -> ProposalResponse:
    logo_ref = files.stage(LOGO_NAMESPACE, logo.filename or "", logo.file.read())
    try:
        staged = PendingFieldManager(db, files=files).propose_change(
            principal.subject_id, EmployerChangeProposal(logo=logo_ref)
        )
    except PortalError:
        files.discard(logo_ref)
        raise
    return ProposalResponse(staged=staged)


@router.post("/employers/me/confirm", response_model=MessageResponse)
def confirm_own_profile(
    principal: Principal = Depends(require_employer),
    db: Session = Depends(get_db),
) -> MessageResponse:
    changed = AccountService(db).confirm_employer_profile(principal.subject_id)
    return MessageResponse(message="Profile confirmed" if changed else "Already confirmed")


@router.get("/employers/me/applications", response_model=ApplicantRecordListResponse)
def list_own_applications(
    principal: Principal = Depends(require_employer),
    db: Session = Depends(get_db),
) -> ApplicantRecordListResponse:
    owner_key = owner_key_for(Repository(db), principal)
    records = ApplicationArchiver(db).list_applications_for_employer(owner_key)
    return ApplicantRecordListResponse(applications=[ApplicantRecordResponse.model_validate(row) for row in records])


# careers


@router.post("/careers", response_model=CareerEnvelope)
def post_career(
    payload: CareerRequest,
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CareerEnvelope:
    career = CareerService(db).post_career(
        principal, title=payload.title, description=payload.description, link=payload.link
    )
    return CareerEnvelope(career=CareerResponse.model_validate(career))


@router.get("/careers", response_model=CareerListResponse)
def list_own_careers(
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CareerListResponse:
    rows = CareerService(db).list_own(principal)
    return CareerListResponse(careers=[CareerResponse.model_validate(row) for row in rows])


@router.get("/careers/public", response_model=CareerPageResponse)
def list_public_careers(
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
) -> CareerPageResponse:
    result = Repository(db).list_public_careers(build_page_request(page, limit, search))
    return CareerPageResponse(
        careers=[CareerResponse.model_validate(row) for row in result.rows],
        **page_payload(result),
    )


@router.delete("/careers/{career_id}", response_model=CareerDeleteResponse)
def delete_career(
    career_id: int,
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CareerDeleteResponse:
    removed = CareerService(db).delete_career(principal, career_id)
    return CareerDeleteResponse(removed_applications=removed)


@router.get("/careers/{career_id}/applications", response_model=LiveApplicationListResponse)
def list_career_applications(
    career_id: int,
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> LiveApplicationListResponse:
    rows = CareerService(db).list_live_applications(principal, career_id)
    return LiveApplicationListResponse(applications=[LiveApplicationResponse.model_validate(row) for row in rows])


# applications


@router.post("/applications", response_model=SubmissionResponse)
def submit_application(
    career_id: int = Form(...),
    first_name: str = Form(""),
    last_name: str = Form(""),
    phone_no: str = Form(""),
    email: str = Form(""),
    resume: UploadFile = File(...),
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
    files: FileStager = Depends(get_file_stager),
) -> SubmissionResponse:
    applicant = ApplicantFields(
        first_name=first_name,
        last_name=last_name,
        phone_no=phone_no,
        email=email,
        user_name=principal.handle if principal and principal.role == "alumni" else "",
    )
    archiver = ApplicationArchiver(db)
    missing = applicant.missing_fields()
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    resume_ref = files.stage(RESUME_NAMESPACE, resume.filename or "", resume.file.read())
    try:
        record = archiver.submit_application(applicant, career_id, resume_ref)
    except PortalError:
        files.discard(resume_ref)
        raise
    return SubmissionResponse(application_id=record.original_app_id, archive_id=record.id)


@router.get("/applications/mine", response_model=ApplicantRecordListResponse)
def list_my_applications(
    principal: Principal = Depends(require_alumni),
    db: Session = Depends(get_db),
) -> ApplicantRecordListResponse:
    records = ApplicationArchiver(db).list_applications_for_applicant(principal.handle)
    return ApplicantRecordListResponse(applications=[ApplicantRecordResponse.model_validate(row) for row in records])


# password reset


@router.post("/password-reset/code", response_model=SendCodeResponse)
def send_reset_code(
    payload: SendCodeRequest,
    db: Session = Depends(get_db),
    codes: OneTimeCodes = Depends(get_codes),
    mailer: Mailer = Depends(get_mailer),
) -> SendCodeResponse:
    email = AccountService(db).send_reset_code(payload.role, payload.user_key, codes=codes, mailer=mailer)
    return SendCodeResponse(email=_mask_email(email))


@router.post("/password-reset/verify", response_model=MessageResponse)
def verify_reset_code(payload: VerifyCodeRequest, codes: OneTimeCodes = Depends(get_codes)) -> MessageResponse:
    if not codes.verify(reset_code_key(payload.role, payload.user_key), payload.code.strip()):
        raise ValidationError("Code expired or invalid")
    return MessageResponse(message="Code verified")


@router.post("/password-reset", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
    codes: OneTimeCodes = Depends(get_codes),
) -> MessageResponse:
    role = AccountService(db).reset_password(
        payload.role, payload.user_key, payload.code.strip(), payload.new_password, codes=codes
    )
    return MessageResponse(message=f"Password reset successfully ({role})")
