from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from careerdesk.types import ApprovalScope, EmployerStatus


class Envelope(BaseModel):
    success: bool = True


class MessageResponse(Envelope):
    message: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(Envelope):
    role: Literal["admin", "employer", "alumni"]
    handle: str
    message: str = ""


class RegistrationResponse(Envelope):
    id: int
    message: str = ""


class EmployerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    employer_name: str
    business_name: str
    business_address: str
    company_website: str
    company_email: str
    landline_no: str
    mobile_no: str
    company_logo: str
    profile_confirmed: bool
    status: str
    submitted_at: datetime | None


class EmployerEnvelope(Envelope):
    employer: EmployerResponse


class EmployerPageResponse(Envelope):
    employers: list[EmployerResponse]
    total: int
    total_pages: int
    current_page: int


class ModeratedValues(BaseModel):
    landline_no: str | None = None
    mobile_no: str | None = None
    company_email: str | None = None
    logo: str | None = None


class PendingStateResponse(Envelope):
    employer_id: int
    user_id: str
    display_name: str
    status: str
    profile_confirmed: bool
    live: ModeratedValues
    pending: ModeratedValues


class PendingQueueResponse(Envelope):
    employers: list[PendingStateResponse]


class ProposalRequest(BaseModel):
    landline_no: str | None = None
    mobile_no: str | None = None
    company_email: str | None = None


class ProposalResponse(Envelope):
    staged: dict[str, str]
    message: str = "Changes submitted for admin review"


class DecisionRequest(BaseModel):
    scope: ApprovalScope


class DecisionResponse(Envelope):
    employer_id: int
    scope: ApprovalScope
    applied: list[str] = Field(default_factory=list)
    discarded: list[str] = Field(default_factory=list)


class StatusRequest(BaseModel):
    status: EmployerStatus


class CareerRequest(BaseModel):
    title: str
    description: str = ""
    link: str = ""


class CareerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    link: str
    owner_key: str
    date_posted: datetime | None


class CareerEnvelope(Envelope):
    career: CareerResponse


class CareerListResponse(Envelope):
    careers: list[CareerResponse]


class CareerPageResponse(CareerListResponse):
    total: int
    total_pages: int
    current_page: int


class CareerDeleteResponse(Envelope):
    removed_applications: int


class LiveApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    career_id: int
    first_name: str
    last_name: str
    phone_no: str
    email: str
    user_name: str
    resume_path: str
    date_submitted: datetime | None


class LiveApplicationListResponse(Envelope):
    applications: list[LiveApplicationResponse]


class ApplicantRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    original_app_id: int
    career_id: int
    first_name: str
    last_name: str
    phone_no: str
    email: str
    user_name: str
    resume_path: str
    career_title: str
    company_name: str
    employer_id: str
    date_submitted: datetime | None
    archived_at: datetime | None


class ApplicantRecordListResponse(Envelope):
    applications: list[ApplicantRecordResponse]


class ApplicantRecordPageResponse(ApplicantRecordListResponse):
    total: int
    total_pages: int
    current_page: int


class SubmissionResponse(Envelope):
    application_id: int
    archive_id: int
    message: str = "Application submitted"


class NotificationRequest(BaseModel):
    name: str
    message: str = ""
    link: str = ""


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    link: str
    message: str
    created_at: datetime | None


class NotificationEnvelope(Envelope):
    notification: NotificationResponse


class NotificationPageResponse(Envelope):
    notifications: list[NotificationResponse]
    total: int
    total_pages: int
    current_page: int


class NotificationSummaryItem(BaseModel):
    name: str
    count: int
    link: str


class NotificationSummaryResponse(Envelope):
    notifications: list[NotificationSummaryItem]


class DeleteResponse(Envelope):
    deleted: int


ResetRole = Literal["employer", "alumni"]


class SendCodeRequest(BaseModel):
    role: ResetRole
    user_key: str


class VerifyCodeRequest(SendCodeRequest):
    code: str


class ResetPasswordRequest(VerifyCodeRequest):
    new_password: str


class SendCodeResponse(Envelope):
    email: str
    message: str = "Code sent to email"


def page_payload(page: Any) -> dict[str, int]:
    return {"total": page.total, "total_pages": page.total_pages, "current_page": page.page}
