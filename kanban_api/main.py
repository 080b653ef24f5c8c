"""FastAPI application factory for the Kanban API."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from . import __version__
from .config import Settings, get_settings
from .db import init_db, make_engine, make_session_factory
from .errors import KanbanError, StoreError
from .routes import router
from .schemas import ErrorEnvelope, Health, Version

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )


def _error(status_code: int, message: str, error=None) -> JSONResponse:
    body = ErrorEnvelope(message=message, error=error)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
    )


def _register_error_handlers(app: FastAPI, settings: Settings) -> None:
    def server_error(exc: Exception) -> JSONResponse:
        detail = str(exc) if settings.expose_errors else None
        return _error(500, "Server error", detail)

    @app.exception_handler(KanbanError)
    async def kanban_error(request: Request, exc: KanbanError):
        if isinstance(exc, StoreError):
            return server_error(exc)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request", exc.errors())

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def store_error(request: Request, exc: SQLAlchemyError):
        logger.exception("store_failed method=%s path=%s", request.method, request.url.path)
        return server_error(exc)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
        return server_error(exc)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and configure the FastAPI application.

    The engine and session factory are owned by the application: they are
    created here and the engine is disposed when the app shuts down.
    """

    settings = settings or get_settings()
    _configure_logging(settings)

    engine = make_engine(settings.database_url, echo=settings.sql_echo)
    init_db(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title="Kanban API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.session_factory = make_session_factory(engine)

    request_logger = logging.getLogger("kanban_api.http")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = int((time.time() - start) * 1000)
            request_logger.info(
                "request method=%s path=%s status=%s duration_ms=%s",
                request.method,
                request.url.path,
                getattr(response, "status_code", "ERR"),
                duration_ms,
            )

    _register_error_handlers(app, settings)

    @app.get("/health", tags=["health"], response_model=Health)
    def health() -> Health:
        return Health()

    @app.get("/version", tags=["health"], response_model=Version)
    def version() -> Version:
        return Version(version=__version__)

    app.include_router(router)
    logger.info("app_ready database=%s", engine.url.render_as_string(hide_password=True))
    return app

