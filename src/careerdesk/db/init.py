from __future__ import annotations

from pathlib import Path

from careerdesk.config import get_settings
from careerdesk.core.files import LOGO_NAMESPACE, RESUME_NAMESPACE
from careerdesk.db.base import Base
from careerdesk.db.session import SessionLocal, engine
from careerdesk.db import models  # noqa: F401
from careerdesk.db.seed import seed_admin_account


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [
        settings.data_dir,
        settings.upload_dir,
        settings.upload_dir / LOGO_NAMESPACE,
        settings.upload_dir / RESUME_NAMESPACE,
    ]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        inserted = seed_admin_account(session)
    return {"seeded_admins": inserted}
