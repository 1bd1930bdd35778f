from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator

ApprovalScope = Literal["logo", "profile"]
EmployerStatus = Literal["PENDING", "ACCEPTED", "DECLINED", "ARCHIVED"]

# proposal field -> (live column, pending column)
PROFILE_FIELDS: dict[str, tuple[str, str]] = {
    "landline_no": ("landline_no", "pending_landline_no"),
    "mobile_no": ("mobile_no", "pending_mobile_no"),
    "company_email": ("company_email", "pending_company_email"),
}
LOGO_FIELDS: dict[str, tuple[str, str]] = {
    "logo": ("company_logo", "pending_company_logo"),
}
MODERATED_FIELDS: dict[str, tuple[str, str]] = {**PROFILE_FIELDS, **LOGO_FIELDS}
SCOPE_FIELDS: dict[str, dict[str, tuple[str, str]]] = {"profile": PROFILE_FIELDS, "logo": LOGO_FIELDS}


def _strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class EmployerChangeProposal(BaseModel):
    landline_no: str | None = None
    mobile_no: str | None = None
    company_email: str | None = None
    logo: str | None = None

    @field_validator("landline_no", "mobile_no", "logo")
    @classmethod
    def validate_present(cls, value: str | None) -> str | None:
        return _strip_optional(value)

    @field_validator("company_email")
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        value = _strip_optional(value)
        if value is not None and "@" not in value:
            raise ValueError("company_email must be an email address")
        return value

    def staged_values(self) -> dict[str, str]:
        return {key: value for key, value in self.model_dump().items() if value is not None}


class ApplicantFields(BaseModel):
    first_name: str = ""
    last_name: str = ""
    phone_no: str = ""
    email: str = ""
    user_name: str = ""

    @field_validator("first_name", "last_name", "phone_no", "email", "user_name")
    @classmethod
    def strip_value(cls, value: str) -> str:
        return value.strip()

    def missing_fields(self) -> list[str]:
        required = ("first_name", "last_name", "phone_no", "email")
        return [name for name in required if not getattr(self, name)]


class EmployerRegistration(BaseModel):
    employer_name: str
    business_name: str = ""
    business_address: str = ""
    landline_no: str = ""
    mobile_no: str = ""
    company_email: str = ""
    company_website: str = ""
    user_id: str
    password: str

    @field_validator("employer_name", "user_id")
    @classmethod
    def validate_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("password must be at least 8 characters")
        return value


class AlumniRegistration(BaseModel):
    user_name: str
    first_name: str
    last_name: str
    personal_email: str
    password: str

    @field_validator("user_name", "first_name", "last_name", "personal_email")
    @classmethod
    def validate_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("password must be at least 8 characters")
        return value
