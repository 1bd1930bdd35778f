from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from careerdesk.config import Settings, get_settings
from careerdesk.core.accounts import AccountService

logger = logging.getLogger(__name__)


def seed_admin_account(session: Session, settings: Settings | None = None) -> int:
    """Create the configured admin account once. Without ADMIN_PASSWORD nothing is seeded."""
    settings = settings or get_settings()
    if not settings.admin_password:
        logger.debug("ADMIN_PASSWORD not set; skipping admin seed")
        return 0
    created = AccountService(session, settings=settings).ensure_admin(settings.admin_username, settings.admin_password)
    return int(created)
