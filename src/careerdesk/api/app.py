from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from careerdesk.api.admin_routes import router as admin_router
from careerdesk.api.routes import router as api_router
from careerdesk.config import get_settings
from careerdesk.core.errors import PortalError
from careerdesk.core.files import URL_PREFIX
from careerdesk.db.init import ensure_data_directories, init_database
from careerdesk.web.routes import router as web_router

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: object) -> JSONResponse:
    return JSONResponse({"success": False, "error": error}, status_code=status_code)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PortalError)
    async def _portal_error(request: Request, exc: PortalError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message or exc.detail)
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Unhandled storage error on %s %s", request.method, request.url.path)
        return _error_response(500, "Internal server error")

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, jsonable_encoder(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)


def create_app() -> FastAPI:
    settings = get_settings()
    static_dir = Path(__file__).resolve().parents[1] / "web" / "static"
    ensure_data_directories()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        max_age=settings.session_ttl_min * 60,
        same_site="lax",
        https_only=settings.app_env == "production",
    )
    install_error_handlers(app)

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    app.include_router(admin_router)
    if settings.web_ui_enabled:
        app.include_router(web_router)

    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    app.mount(URL_PREFIX, StaticFiles(directory=str(settings.upload_dir)), name="uploads")
    return app
