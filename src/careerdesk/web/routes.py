from __future__ import annotations

from pathlib import Path
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from careerdesk.api.deps import PRINCIPAL_SESSION_KEY, get_db, get_principal
from careerdesk.config import get_settings
from careerdesk.core.accounts import AccountService
from careerdesk.core.capabilities import Principal
from careerdesk.core.errors import PortalError
from careerdesk.core.moderation import ApprovalAuthority, PendingFieldManager
from careerdesk.core.pagination import build_page_request
from careerdesk.db.repositories import Repository

router = APIRouter(tags=["web"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

LOGIN_URL = "/admin/login"


def _login_redirect() -> RedirectResponse:
    return RedirectResponse(url=LOGIN_URL, status_code=303)


def _is_admin(principal: Principal | None) -> bool:
    return principal is not None and principal.is_admin


@router.get("/", include_in_schema=False)
def index() -> RedirectResponse:
    return RedirectResponse(url="/admin/moderation", status_code=303)


@router.get(LOGIN_URL, response_class=HTMLResponse)
def login_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "login.html", {"app_name": get_settings().app_name, "error": None})


@router.post("/web/admin/login")
def login_submit(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
) -> Response:
    try:
        principal = AccountService(db).authenticate_admin(username.strip(), password)
    except PortalError as exc:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"app_name": get_settings().app_name, "error": exc.detail},
            status_code=exc.status_code,
        )
    request.session.clear()
    request.session[PRINCIPAL_SESSION_KEY] = principal.to_session()
    return RedirectResponse(url="/admin/moderation", status_code=303)


@router.post("/web/admin/logout")
def logout_submit(request: Request) -> RedirectResponse:
    request.session.clear()
    return _login_redirect()


@router.get("/admin/moderation", response_class=HTMLResponse)
def moderation_page(
    request: Request,
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Response:
    if not _is_admin(principal):
        return _login_redirect()
    return templates.TemplateResponse(
        request,
        "moderation.html",
        {
            "app_name": get_settings().app_name,
            "principal": principal,
            "queue": PendingFieldManager(db).list_pending_changes(),
            "flash": request.query_params.get("flash"),
        },
    )


def _decide(
    action: str,
    employer_id: int,
    scope: str,
    principal: Principal | None,
    db: Session,
) -> RedirectResponse:
    authority = ApprovalAuthority(db)
    decide = authority.approve if action == "approve" else authority.reject
    try:
        result = decide(principal, employer_id, scope)
        changed = result.get("applied") or result.get("discarded") or []
        flash = f"{action}d {scope} for employer {employer_id}: {', '.join(changed) or 'nothing pending'}"
    except PortalError as exc:
        flash = exc.detail
    return RedirectResponse(url=f"/admin/moderation?{urlencode({'flash': flash})}", status_code=303)


@router.post("/web/admin/employers/{employer_id}/approve")
def approve_submit(
    employer_id: int,
    scope: str = Form(...),
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> RedirectResponse:
    if not _is_admin(principal):
        return _login_redirect()
    return _decide("approve", employer_id, scope, principal, db)


@router.post("/web/admin/employers/{employer_id}/reject")
def reject_submit(
    employer_id: int,
    scope: str = Form(...),
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> RedirectResponse:
    if not _is_admin(principal):
        return _login_redirect()
    return _decide("reject", employer_id, scope, principal, db)


@router.get("/admin/inbox", response_class=HTMLResponse)
def inbox_page(
    request: Request,
    page: int | None = None,
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Response:
    if not _is_admin(principal):
        return _login_redirect()
    result = Repository(db).list_notifications(build_page_request(page, None, None))
    return templates.TemplateResponse(
        request,
        "inbox.html",
        {"app_name": get_settings().app_name, "principal": principal, "page": result},
    )


@router.post("/web/admin/notifications/clear")
def clear_inbox_submit(
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> RedirectResponse:
    if not _is_admin(principal):
        return _login_redirect()
    Repository(db).clear_notifications()
    return RedirectResponse(url="/admin/inbox", status_code=303)
