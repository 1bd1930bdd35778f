from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import delete, select

from careerdesk.api.app import create_app
from careerdesk.db.models import Employer
from careerdesk.db.session import SessionLocal

ADMIN_PASSWORD = "admin-pass-123"
EMPLOYER_PASSWORD = "employer-pass-123"


def _employer_id(handle: str) -> int:
    with SessionLocal() as db:
        return db.scalar(select(Employer.id).where(Employer.user_id == handle))


def test_registration_then_login_requires_acceptance(client: TestClient) -> None:
    resp = client.post(
        "/api/employers/register",
        json={
            "employer_name": "Acme HR",
            "business_name": "Acme Corp",
            "company_email": "hr@acme.example",
            "user_id": "empA",
            "password": EMPLOYER_PASSWORD,
        },
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    dup = client.post(
        "/api/employers/register",
        json={"employer_name": "Other", "user_id": "EMPA", "password": EMPLOYER_PASSWORD},
    )
    assert dup.status_code == 409
    assert dup.json() == {"success": False, "error": "Preferred User ID is already taken. Please choose another."}

    login = client.post("/api/session/employer", json={"username": "empA", "password": EMPLOYER_PASSWORD})
    assert login.status_code == 403
    assert login.json()["error"] == "Your account is PENDING. Access denied."


def test_reserved_admin_handle_cannot_be_registered(client: TestClient) -> None:
    resp = client.post(
        "/api/employers/register",
        json={"employer_name": "Sneaky", "user_id": "Admin", "password": EMPLOYER_PASSWORD},
    )
    assert resp.status_code == 409


def test_request_validation_uses_error_envelope(client: TestClient) -> None:
    resp = client.post("/api/employers/register", json={"employer_name": "Acme"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert isinstance(body["error"], list)


def test_employer_proposes_and_admin_approves(employer_client: TestClient, admin_account: str) -> None:
    resp = employer_client.post("/api/employers/me/changes", json={"landline_no": "222"})
    assert resp.status_code == 200
    assert resp.json()["staged"] == {"landline_no": "222"}

    me = employer_client.get("/api/employers/me").json()["employer"]
    assert me["landline_no"] == "111"

    pending = employer_client.get("/api/employers/me/pending").json()
    assert pending["pending"]["landline_no"] == "222"
    assert pending["live"]["landline_no"] == "111"

    admin = TestClient(create_app())
    admin.post("/api/session/admin", json={"username": admin_account, "password": ADMIN_PASSWORD})
    queue = admin.get("/api/admin/employers/pending-changes").json()["employers"]
    assert [item["user_id"] for item in queue] == ["empA"]

    employer_id = _employer_id("empA")
    decision = admin.post(f"/api/admin/employers/{employer_id}/approve", json={"scope": "profile"})
    assert decision.status_code == 200
    assert decision.json()["applied"] == ["landline_no"]

    me = employer_client.get("/api/employers/me").json()["employer"]
    assert me["landline_no"] == "222"
    assert admin.get("/api/admin/employers/pending-changes").json()["employers"] == []


def test_invalid_proposals_are_rejected(employer_client: TestClient) -> None:
    assert employer_client.post("/api/employers/me/changes", json={}).status_code == 400
    assert employer_client.post("/api/employers/me/changes", json={"company_email": "nope"}).status_code == 400
    assert employer_client.post("/api/employers/me/changes", json={"mobile_no": "  "}).status_code == 400


def test_logo_upload_flow(employer_client: TestClient, admin_account: str) -> None:
    bad = employer_client.post("/api/employers/me/logo", files={"logo": ("logo.exe", b"MZ", "application/octet-stream")})
    assert bad.status_code == 400

    resp = employer_client.post("/api/employers/me/logo", files={"logo": ("logo.png", b"\x89PNG", "image/png")})
    assert resp.status_code == 200
    logo_ref = resp.json()["staged"]["logo"]
    assert logo_ref.startswith("/uploads/company_logos/")

    assert employer_client.post("/api/employers/me/confirm").status_code == 400

    admin = TestClient(create_app())
    admin.post("/api/session/admin", json={"username": admin_account, "password": ADMIN_PASSWORD})
    employer_id = _employer_id("empA")
    assert admin.post(f"/api/admin/employers/{employer_id}/approve", json={"scope": "logo"}).json()["applied"] == ["logo"]

    assert employer_client.get(logo_ref).content == b"\x89PNG"
    confirm = employer_client.post("/api/employers/me/confirm")
    assert confirm.status_code == 200
    assert confirm.json()["message"] == "Profile confirmed"
    assert employer_client.post("/api/employers/me/confirm").json()["message"] == "Already confirmed"


def test_capability_errors(employer_client: TestClient) -> None:
    anonymous = TestClient(create_app())
    assert anonymous.get("/api/employers/me").status_code == 401
    assert anonymous.get("/api/admin/employers").status_code == 401
    assert anonymous.get("/api/session").status_code == 401

    assert employer_client.get("/api/admin/employers").status_code == 403
    resp = employer_client.post("/api/admin/employers/1/approve", json={"scope": "profile"})
    assert resp.status_code == 403
    assert resp.json()["success"] is False

    assert employer_client.get("/api/session").json()["role"] == "employer"
    employer_client.delete("/api/session")
    assert employer_client.get("/api/employers/me").status_code == 401


def test_deleted_employer_handle_stays_reserved(employer_client: TestClient, admin_account: str) -> None:
    career = employer_client.post("/api/careers", json={"title": "Backend Intern"}).json()["career"]
    applied = TestClient(create_app()).post(
        "/api/applications",
        data={
            "career_id": str(career["id"]),
            "first_name": "John",
            "last_name": "Doe",
            "phone_no": "0917",
            "email": "jdoe@example.com",
        },
        files={"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert applied.status_code == 200

    admin = TestClient(create_app())
    admin.post("/api/session/admin", json={"username": admin_account, "password": ADMIN_PASSWORD})
    old_id = _employer_id("empA")
    assert admin.delete(f"/api/admin/employers/{old_id}").status_code == 200

    # the old session loses access as soon as the account is retired
    stale = employer_client.get("/api/employers/me/applications")
    assert stale.status_code == 403
    assert employer_client.get("/api/careers").status_code == 403

    again = TestClient(create_app()).post(
        "/api/employers/register",
        json={"employer_name": "Stranger Inc", "user_id": "empA", "password": EMPLOYER_PASSWORD},
    )
    assert again.status_code == 409

    relogin = TestClient(create_app()).post(
        "/api/session/employer", json={"username": "empA", "password": EMPLOYER_PASSWORD}
    )
    assert relogin.status_code == 403
    assert relogin.json()["error"] == "Your account is ARCHIVED. Access denied."

    newcomer = TestClient(create_app())
    newcomer.post(
        "/api/employers/register",
        json={"employer_name": "Stranger Inc", "user_id": "empB", "password": EMPLOYER_PASSWORD},
    )
    new_id = _employer_id("empB")
    assert new_id > old_id
    admin.patch(f"/api/admin/employers/{new_id}/status", json={"status": "ACCEPTED"})
    newcomer.post("/api/session/employer", json={"username": "empB", "password": EMPLOYER_PASSWORD})
    assert newcomer.get("/api/employers/me/applications").json()["applications"] == []
    assert newcomer.get("/api/careers").json()["careers"] == []


def test_employer_ids_are_not_reused(make_employer) -> None:
    first_id = make_employer("empA")
    with SessionLocal() as db:
        db.execute(delete(Employer).where(Employer.id == first_id))
        db.commit()
    assert make_employer("empB") > first_id
