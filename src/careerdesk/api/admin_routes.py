from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from careerdesk.api.deps import PRINCIPAL_SESSION_KEY, get_db, require_admin
from careerdesk.api.schemas import (
    ApplicantRecordPageResponse,
    ApplicantRecordResponse,
    DecisionRequest,
    DecisionResponse,
    DeleteResponse,
    EmployerEnvelope,
    EmployerPageResponse,
    EmployerResponse,
    MessageResponse,
    NotificationEnvelope,
    NotificationPageResponse,
    NotificationRequest,
    NotificationResponse,
    NotificationSummaryItem,
    NotificationSummaryResponse,
    PendingQueueResponse,
    PendingStateResponse,
    StatusRequest,
    page_payload,
)
from careerdesk.core.accounts import AccountService
from careerdesk.core.capabilities import Principal
from careerdesk.core.errors import NotFound, ValidationError
from careerdesk.core.moderation import ApprovalAuthority, PendingFieldManager
from careerdesk.core.notifications import NotificationEmitter, serialize_notification
from careerdesk.core.pagination import build_page_request
from careerdesk.core.runtime import get_event_bus
from careerdesk.db.repositories import Repository
from careerdesk.db.session import SessionLocal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# employers


@router.get("/employers", response_model=EmployerPageResponse)
def list_employers(
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> EmployerPageResponse:
    result = Repository(db).list_employers(build_page_request(page, limit, search))
    return EmployerPageResponse(
        employers=[EmployerResponse.model_validate(row) for row in result.rows],
        **page_payload(result),
    )


@router.get("/employers/pending-changes", response_model=PendingQueueResponse)
def list_pending_changes(
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PendingQueueResponse:
    rows = PendingFieldManager(db).list_pending_changes()
    return PendingQueueResponse(employers=[PendingStateResponse(**row) for row in rows])


@router.get("/employers/{employer_id}", response_model=EmployerEnvelope)
def get_employer(
    employer_id: int,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> EmployerEnvelope:
    employer = Repository(db).get_employer(employer_id)
    if employer is None:
        raise NotFound(f"Employer {employer_id} not found")
    return EmployerEnvelope(employer=EmployerResponse.model_validate(employer))


@router.patch("/employers/{employer_id}/status", response_model=EmployerEnvelope)
def set_employer_status(
    employer_id: int,
    payload: StatusRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> EmployerEnvelope:
    employer = AccountService(db).set_employer_status(principal, employer_id, payload.status)
    return EmployerEnvelope(employer=EmployerResponse.model_validate(employer))


@router.delete("/employers/{employer_id}", response_model=MessageResponse)
def delete_employer(
    employer_id: int,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessageResponse:
    AccountService(db).delete_employer(principal, employer_id)
    return MessageResponse(message="Employer deleted successfully")


# moderation


@router.get("/employers/{employer_id}/pending", response_model=PendingStateResponse)
def get_pending_state(
    employer_id: int,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PendingStateResponse:
    return PendingStateResponse(**PendingFieldManager(db).get_pending_and_live(employer_id))


@router.post("/employers/{employer_id}/approve", response_model=DecisionResponse)
def approve_changes(
    employer_id: int,
    payload: DecisionRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> DecisionResponse:
    return DecisionResponse(**ApprovalAuthority(db).approve(principal, employer_id, payload.scope))


@router.post("/employers/{employer_id}/reject", response_model=DecisionResponse)
def reject_changes(
    employer_id: int,
    payload: DecisionRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> DecisionResponse:
    return DecisionResponse(**ApprovalAuthority(db).reject(principal, employer_id, payload.scope))


# applications archive


@router.get("/applications", response_model=ApplicantRecordPageResponse)
def list_archived_applications(
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApplicantRecordPageResponse:
    result = Repository(db).list_applicant_records(build_page_request(page, limit, search))
    return ApplicantRecordPageResponse(
        applications=[ApplicantRecordResponse.model_validate(row) for row in result.rows],
        **page_payload(result),
    )


# notifications


@router.get("/notifications", response_model=NotificationPageResponse)
def inbox(
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NotificationPageResponse:
    result = Repository(db).list_notifications(build_page_request(page, limit, search))
    return NotificationPageResponse(
        notifications=[NotificationResponse.model_validate(row) for row in result.rows],
        **page_payload(result),
    )


@router.post("/notifications", response_model=NotificationEnvelope)
def add_notification(
    payload: NotificationRequest,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NotificationEnvelope:
    if not payload.name.strip():
        raise ValidationError("name is required")
    notification = NotificationEmitter(db).emit(name=payload.name.strip(), message=payload.message, link=payload.link)
    if notification is None:
        raise ValidationError("Notification could not be saved")
    return NotificationEnvelope(notification=NotificationResponse.model_validate(notification))


@router.delete("/notifications", response_model=DeleteResponse)
def clear_notifications(
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> DeleteResponse:
    deleted = Repository(db).clear_notifications()
    logger.info("All notifications cleared (%s deleted)", deleted)
    return DeleteResponse(deleted=deleted)


@router.delete("/notifications/{notification_id}", response_model=DeleteResponse)
def delete_notification(
    notification_id: int,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> DeleteResponse:
    if not Repository(db).delete_notification(notification_id):
        raise NotFound(f"Notification {notification_id} not found")
    return DeleteResponse(deleted=1)


@router.get("/notifications/summary", response_model=NotificationSummaryResponse)
def notification_summary(
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NotificationSummaryResponse:
    repo = Repository(db)
    return NotificationSummaryResponse(
        notifications=[
            NotificationSummaryItem(
                name="Employer Registrations",
                count=repo.count_employers_by_status("PENDING"),
                link="/admin/employers",
            ),
            NotificationSummaryItem(
                name="Employer Profile Changes",
                count=len(repo.list_employers_with_pending_changes()),
                link="/admin/moderation",
            ),
        ]
    )


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue, replayed: set[int]) -> None:
    while True:
        event = await queue.get()
        # emitted between registration and the backlog read
        if event.get("id") in replayed:
            continue
        await websocket.send_json({"type": "newNotification", "notification": event})


@router.websocket("/notifications/stream")
async def stream_notifications(websocket: WebSocket) -> None:
    principal = Principal.from_session(websocket.session.get(PRINCIPAL_SESSION_KEY))
    if principal is None or not principal.is_admin:
        await websocket.close(code=4403)
        return

    await websocket.accept()
    bus = get_event_bus()
    queue = bus.register()
    try:
        with SessionLocal() as db:
            backlog = [serialize_notification(row) for row in Repository(db).list_recent_notifications()]
        await websocket.send_json({"type": "loadNotifications", "notifications": backlog})
    except BaseException:
        bus.unregister(queue)
        raise

    forwarder = asyncio.create_task(_forward_events(websocket, queue, {row["id"] for row in backlog}))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        bus.unregister(queue)
        forwarder.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
            await forwarder
    logger.debug("Notification stream closed for %s", principal.handle)
