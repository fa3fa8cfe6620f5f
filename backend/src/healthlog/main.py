from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.requests import Request

from healthlog.core.config import Settings, get_settings
from healthlog.core.database import Database
from healthlog.core.errors import (
    ConstraintViolation,
    InvariantBreach,
    MalformedDocument,
    StorageUnavailable,
    StoreError,
)
from healthlog.core.logging import setup_logging
from healthlog.projector import build_projector
from healthlog.routers import meals, weight

logger = logging.getLogger(__name__)

CORE_ROUTERS = (
    meals.router,
    weight.router,
)

# Most specific first.
ERROR_RESPONSES = (
    (ConstraintViolation, 409, "constraint_violation"),
    (MalformedDocument, 422, "malformed_document"),
    (StorageUnavailable, 503, "storage_unavailable"),
    (InvariantBreach, 500, "invariant_breach"),
)


def _store_error_response(exc: StoreError) -> JSONResponse:
    for error_cls, status_code, kind in ERROR_RESPONSES:
        if isinstance(exc, error_cls):
            return JSONResponse(status_code=status_code, content={"error": kind, "message": str(exc)})
    return JSONResponse(status_code=500, content={"error": "store_error", "message": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.database_url, echo=settings.database_echo)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
    )
    application.state.database = database
    application.state.projector = build_projector(database)

    @application.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        if isinstance(exc, (StorageUnavailable, InvariantBreach)):
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return _store_error_response(exc)

    @application.middleware("http")
    async def enforce_utf8_json(request: Request, call_next):
        response = await call_next(request)
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"
        return response

    @application.get("/favicon.ico", include_in_schema=False)
    def favicon():
        return Response(status_code=204)

    for router in CORE_ROUTERS:
        application.include_router(router)

    @application.get("/", include_in_schema=False)
    def root():
        target = settings.docs_url or "/docs"
        return RedirectResponse(target)

    @application.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    @application.get("/__dbcheck", include_in_schema=False)
    def dbcheck():
        return {
            "tables": database.table_names(),
            "foreign_keys": database.foreign_keys_enabled(),
        }

    @application.on_event("startup")
    def _startup():
        database.acquire()

    @application.on_event("shutdown")
    def _shutdown():
        database.release()

    return application


_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_format)

app = create_app(_settings)
