from __future__ import annotations

from fastapi.testclient import TestClient

from careerdesk.api.app import create_app
from careerdesk.core.accounts import AccountService
from careerdesk.db.session import SessionLocal
from careerdesk.types import AlumniRegistration

ALUMNI_PASSWORD = "alumni-pass-123"
RESUME = ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")
APPLICANT_FORM = {"first_name": "John", "last_name": "Doe", "phone_no": "0917", "email": "jdoe@example.com"}


def _alumni_client() -> TestClient:
    with SessionLocal() as db:
        AccountService(db).register_alumni(
            AlumniRegistration(
                user_name="jdoe",
                first_name="John",
                last_name="Doe",
                personal_email="jdoe@example.com",
                password=ALUMNI_PASSWORD,
            )
        )
    client = TestClient(create_app())
    resp = client.post("/api/session/alumni", json={"username": "jdoe", "password": ALUMNI_PASSWORD})
    assert resp.status_code == 200
    return client


def _post_career(client: TestClient, title: str = "Backend Intern") -> int:
    resp = client.post("/api/careers", json={"title": title, "description": "Python services"})
    assert resp.status_code == 200
    return resp.json()["career"]["id"]


def test_employer_posts_and_lists_own_careers(employer_client: TestClient) -> None:
    career_id = _post_career(employer_client)
    careers = employer_client.get("/api/careers").json()["careers"]
    assert [(c["id"], c["owner_key"]) for c in careers] == [(career_id, "empA")]

    public = TestClient(create_app()).get("/api/careers/public", params={"search": "backend"}).json()
    assert public["total"] == 1
    assert public["careers"][0]["title"] == "Backend Intern"


def test_alumni_cannot_post_careers() -> None:
    alumni = _alumni_client()
    assert alumni.post("/api/careers", json={"title": "Nope"}).status_code == 403


def test_alumni_application_is_archived_and_visible_to_both_sides(employer_client: TestClient) -> None:
    career_id = _post_career(employer_client)
    alumni = _alumni_client()

    resp = alumni.post(
        "/api/applications",
        data={**APPLICANT_FORM, "career_id": str(career_id)},
        files={"resume": RESUME},
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    mine = alumni.get("/api/applications/mine").json()["applications"]
    assert len(mine) == 1
    assert mine[0]["career_title"] == "Backend Intern"
    assert mine[0]["company_name"] == "Acme Corp"
    assert mine[0]["user_name"] == "jdoe"

    received = employer_client.get("/api/employers/me/applications").json()["applications"]
    assert [row["email"] for row in received] == ["jdoe@example.com"]

    live = employer_client.get(f"/api/careers/{career_id}/applications").json()["applications"]
    assert live[0]["resume_path"].startswith("/uploads/resumes/")


def test_anonymous_application_and_career_deletion_keeps_archive(employer_client: TestClient) -> None:
    career_id = _post_career(employer_client)
    anonymous = TestClient(create_app())
    resp = anonymous.post(
        "/api/applications",
        data={**APPLICANT_FORM, "career_id": str(career_id)},
        files={"resume": RESUME},
    )
    assert resp.status_code == 200

    deleted = employer_client.delete(f"/api/careers/{career_id}")
    assert deleted.json()["removed_applications"] == 1

    archived = employer_client.get("/api/employers/me/applications").json()["applications"]
    assert len(archived) == 1
    assert archived[0]["user_name"] == ""
    assert archived[0]["career_title"] == "Backend Intern"


def test_application_validation(employer_client: TestClient) -> None:
    career_id = _post_career(employer_client)
    anonymous = TestClient(create_app())

    missing = anonymous.post(
        "/api/applications",
        data={"first_name": "John", "career_id": str(career_id)},
        files={"resume": RESUME},
    )
    assert missing.status_code == 400
    assert missing.json()["error"] == "Missing required fields: last_name, phone_no, email"

    wrong_type = anonymous.post(
        "/api/applications",
        data={**APPLICANT_FORM, "career_id": str(career_id)},
        files={"resume": ("cv.docx", b"doc", "application/msword")},
    )
    assert wrong_type.status_code == 400

    unknown = anonymous.post(
        "/api/applications",
        data={**APPLICANT_FORM, "career_id": "9999"},
        files={"resume": RESUME},
    )
    assert unknown.status_code == 404


def test_other_employer_cannot_touch_career(employer_client: TestClient, make_employer) -> None:
    career_id = _post_career(employer_client)
    make_employer("empB", business_name="Beta Ltd")
    other = TestClient(create_app())
    other.post("/api/session/employer", json={"username": "empB", "password": "employer-pass-123"})

    assert other.delete(f"/api/careers/{career_id}").status_code == 403
    assert other.get(f"/api/careers/{career_id}/applications").status_code == 403
