from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="careerdesk-tests-"))
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_ROOT / 'careerdesk.db'}")
os.environ.setdefault("DATA_DIR", str(_TEST_ROOT))
os.environ.setdefault("UPLOAD_DIR", str(_TEST_ROOT / "uploads"))
os.environ.setdefault("SMTP_HOST", "")

import pytest
from fastapi.testclient import TestClient

from careerdesk.api.app import create_app
from careerdesk.config import get_settings
from careerdesk.core.accounts import AccountService
from careerdesk.core.runtime import reset_runtime
from careerdesk.db.base import Base
from careerdesk.db.init import ensure_data_directories
from careerdesk.db.repositories import Repository
from careerdesk.db.session import SessionLocal, engine
from careerdesk.types import EmployerRegistration

ADMIN_PASSWORD = "admin-pass-123"
EMPLOYER_PASSWORD = "employer-pass-123"


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    shutil.rmtree(get_settings().upload_dir, ignore_errors=True)
    ensure_data_directories()
    reset_runtime()
    yield


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def admin_account() -> str:
    with SessionLocal() as db:
        AccountService(db).ensure_admin("root", ADMIN_PASSWORD)
    return "root"


@pytest.fixture
def admin_client(client: TestClient, admin_account: str) -> TestClient:
    resp = client.post("/api/session/admin", json={"username": admin_account, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client


@pytest.fixture
def make_employer():
    def _make(
        user_id: str = "empA",
        *,
        status: str = "ACCEPTED",
        business_name: str = "Acme Corp",
        landline_no: str = "111",
        company_email: str = "hr@acme.example",
    ) -> int:
        with SessionLocal() as db:
            employer = AccountService(db).register_employer(
                EmployerRegistration(
                    employer_name=f"{business_name} HR",
                    business_name=business_name,
                    landline_no=landline_no,
                    mobile_no="0917",
                    company_email=company_email,
                    user_id=user_id,
                    password=EMPLOYER_PASSWORD,
                )
            )
            if status != "PENDING":
                Repository(db).set_employer_status(employer.id, status)
            return employer.id

    return _make


@pytest.fixture
def employer_client(client: TestClient, make_employer) -> TestClient:
    make_employer("empA")
    resp = client.post("/api/session/employer", json={"username": "empA", "password": EMPLOYER_PASSWORD})
    assert resp.status_code == 200
    return client
