from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from sqlalchemy.exc import OperationalError as SAOperationalError

from api.router import api_router
from core.bootstrap import ensure_schema
from core.config import settings
from core.database import (
    DatabaseUnavailableError,
    SessionLocal,
    is_transient_db_connectivity_error,
    open_session,
    validate_db_connection,
)
from core.logging import setup_logging
from scheduling.errors import PersistenceError, ScheduleNotFoundError
from services.draft_registry import DraftRegistry
from services.schedule_backend import SqlScheduleBackend


logger = logging.getLogger(__name__)


def _db_unavailable_response() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "code": "DATABASE_UNAVAILABLE",
            "message": "Database temporarily unavailable. Please retry.",
        },
    )


def create_app(*, registry: DraftRegistry | None = None, bootstrap_schema: bool = True) -> FastAPI:
    setup_logging(environment=settings.environment)
    is_production = settings.environment.lower() == "production"
    app = FastAPI(
        title="Schedule Builder API",
        version="0.1.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )

    if bootstrap_schema:
        ensure_schema()

    app.state.draft_registry = registry or DraftRegistry(
        lambda identity: SqlScheduleBackend(open_session, identity),
        autosync=settings.draft_autosync,
        credit_components=settings.credit_component_list,
    )

    @app.exception_handler(ScheduleNotFoundError)
    def _schedule_not_found(_request, _exc: ScheduleNotFoundError):
        return JSONResponse(
            status_code=404,
            content={"code": "SCHEDULE_NOT_FOUND", "message": "Schedule not found or unauthorized."},
        )

    @app.exception_handler(PermissionError)
    def _not_authenticated(_request, _exc: PermissionError):
        return JSONResponse(
            status_code=401,
            content={"code": "NOT_AUTHENTICATED", "message": "You must be logged in."},
        )

    @app.exception_handler(PersistenceError)
    def _persistence_error(_request, exc: PersistenceError):
        if isinstance(exc, DatabaseUnavailableError):
            logger.warning("Database unavailable (503)", exc_info=exc)
            return _db_unavailable_response()
        logger.error("Persistence failure (500)", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "code": "DATABASE_ERROR",
                "message": "Database operation failed.",
            },
        )

    @app.exception_handler(SAOperationalError)
    def _sqlalchemy_operational_error(_request, exc: SAOperationalError):
        if is_transient_db_connectivity_error(exc):
            logger.warning("Database transient connectivity error (503)", exc_info=exc)
            return _db_unavailable_response()
        return JSONResponse(
            status_code=500,
            content={
                "code": "DATABASE_ERROR",
                "message": "Database operation failed.",
            },
        )

    allow_origins = [settings.frontend_origin]
    allow_origin_regex = None
    if not is_production:
        # Dev-friendly: allow the configured origin and any localhost port.
        allow_origins.extend(["http://localhost:3000", "http://127.0.0.1:3000"])
        allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict:
        # Always respond; reflect DB availability without crashing.
        db_status = "ok"
        try:
            with SessionLocal() as db:
                validate_db_connection(db)
        except Exception:
            db_status = "down"

        return {"app": "ok", "database": db_status}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
