from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerdesk.core.events import EventBus
from careerdesk.core.runtime import get_event_bus
from careerdesk.db.models import Notification
from careerdesk.db.repositories import Repository

logger = logging.getLogger(__name__)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "name": notification.name,
        "message": notification.message,
        "link": notification.link,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }


class NotificationEmitter:
    def __init__(self, session: Session, *, event_bus: EventBus | None = None):
        self.session = session
        self.repo = Repository(session)
        self.event_bus = event_bus or get_event_bus()

    def emit(self, *, name: str, message: str, link: str = "") -> Notification | None:
        """Persist and broadcast. Never raises: the triggering operation has already committed."""
        try:
            notification = self.repo.add_notification(name=name, message=message, link=link)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Could not persist notification name=%s", name)
            return None

        payload = serialize_notification(notification)
        delivered = self.event_bus.publish(payload)
        logger.debug("Notification %s broadcast to %s listener(s)", notification.id, delivered)
        return notification
