from __future__ import annotations

import pytest

from careerdesk.core.capabilities import Principal, require_role
from careerdesk.core.errors import AuthorizationError, NotAuthenticated


def test_missing_principal_is_unauthenticated() -> None:
    with pytest.raises(NotAuthenticated) as exc_info:
        require_role(None, "admin")
    assert exc_info.value.status_code == 401


def test_wrong_role_is_forbidden() -> None:
    employer = Principal(role="employer", subject_id=7, handle="empA")
    with pytest.raises(AuthorizationError) as exc_info:
        require_role(employer, "admin")
    assert exc_info.value.status_code == 403


def test_matching_role_passes_through() -> None:
    admin = Principal(role="admin", subject_id=1, handle="root")
    assert require_role(admin, "admin") is admin


def test_session_round_trip_and_tampering() -> None:
    principal = Principal(role="alumni", subject_id=3, handle="jdoe")
    assert Principal.from_session(principal.to_session()) == principal
    assert Principal.from_session({"role": "superuser", "subject_id": 1}) is None
    assert Principal.from_session({"role": "admin", "subject_id": "1"}) is None
    assert Principal.from_session(None) is None
