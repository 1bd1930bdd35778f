from __future__ import annotations

import json

import typer
import uvicorn

from careerdesk.api.app import create_app
from careerdesk.config import get_settings
from careerdesk.core.accounts import AccountService
from careerdesk.core.capabilities import Principal
from careerdesk.core.errors import PortalError
from careerdesk.core.moderation import ApprovalAuthority, PendingFieldManager
from careerdesk.core.pagination import build_page_request
from careerdesk.db.init import init_database
from careerdesk.db.repositories import Repository
from careerdesk.db.session import SessionLocal
from careerdesk.logging_config import configure_logging

app = typer.Typer(help="CareerDesk CLI")
admin_app = typer.Typer(help="Manage admin accounts")
employer_app = typer.Typer(help="Review employer profile changes")
notifications_app = typer.Typer(help="Admin inbox")

app.add_typer(admin_app, name="admin")
app.add_typer(employer_app, name="employer")
app.add_typer(notifications_app, name="notifications")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _echo(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _fail(exc: PortalError) -> None:
    _echo({"success": False, "error": exc.detail})
    raise typer.Exit(code=1)


@app.command("init")
def init_cmd() -> None:
    """Initialize database, upload directories, and the configured admin account."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)


@admin_app.command("create")
def admin_create(
    username: str = typer.Option(..., "--username"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, confirmation_prompt=True),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            created = AccountService(db).ensure_admin(username.strip(), password)
        except PortalError as exc:
            _fail(exc)
            return
    _echo({"user_name": username.strip(), "created": created})


@employer_app.command("pending")
def employer_pending() -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        _echo(PendingFieldManager(db).list_pending_changes())


@employer_app.command("approve")
def employer_approve(
    employer_id: int = typer.Option(..., "--employer-id"),
    scope: str = typer.Option(..., "--scope", help="profile or logo"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            result = ApprovalAuthority(db).approve(Principal.operator(), employer_id, scope)
        except PortalError as exc:
            _fail(exc)
            return
    _echo(result)


@employer_app.command("reject")
def employer_reject(
    employer_id: int = typer.Option(..., "--employer-id"),
    scope: str = typer.Option(..., "--scope", help="profile or logo"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            result = ApprovalAuthority(db).reject(Principal.operator(), employer_id, scope)
        except PortalError as exc:
            _fail(exc)
            return
    _echo(result)


@notifications_app.command("list")
def notifications_list(
    page: int = typer.Option(1, "--page"),
    limit: int | None = typer.Option(None, "--limit"),
    search: str | None = typer.Option(None, "--search"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            result = Repository(db).list_notifications(build_page_request(page, limit, search))
        except PortalError as exc:
            _fail(exc)
            return
        rows = [
            {"id": row.id, "name": row.name, "message": row.message, "link": row.link, "created_at": row.created_at}
            for row in result.rows
        ]
    _echo({"notifications": rows, "total": result.total, "total_pages": result.total_pages, "current_page": result.page})


if __name__ == "__main__":
    app()
