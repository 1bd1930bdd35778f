from __future__ import annotations

import pytest
from pydantic import ValidationError

from careerdesk.types import ApplicantFields, EmployerChangeProposal, EmployerRegistration


def test_proposal_stages_only_provided_fields() -> None:
    proposal = EmployerChangeProposal(landline_no=" 222 ")
    assert proposal.staged_values() == {"landline_no": "222"}


def test_proposal_rejects_blank_and_malformed_values() -> None:
    with pytest.raises(ValidationError):
        EmployerChangeProposal(mobile_no="   ")
    with pytest.raises(ValidationError):
        EmployerChangeProposal(company_email="not-an-email")


def test_empty_proposal_stages_nothing() -> None:
    assert EmployerChangeProposal().staged_values() == {}


def test_applicant_missing_fields() -> None:
    applicant = ApplicantFields(first_name="John", last_name=" ", phone_no="0917", email="")
    assert applicant.missing_fields() == ["last_name", "email"]


def test_registration_requires_password_length() -> None:
    with pytest.raises(ValidationError):
        EmployerRegistration(employer_name="Acme", user_id="empA", password="short")
