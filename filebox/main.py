"""
FastAPI application factory.

Assembles the app around one Filebox (base directory + metadata store +
resolver), registers the routers and maps core errors that are not
handled per-route onto HTTP responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from filebox import __version__
from filebox.controllers.file_controller import router as file_router
from filebox.controllers.permission_controller import router as permission_router
from filebox.core.config import Settings, settings
from filebox.core.errors import (
    CorruptRecordError,
    NotFoundOnDisk,
    StorageIOError,
    Unauthenticated,
)
from filebox.core.security import JWTAuthProvider
from filebox.schemas import HealthResponse
from filebox.services.file_service import Filebox

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = app_settings
    app.state.filebox = Filebox.from_settings(app_settings)
    app.state.auth = JWTAuthProvider.from_settings(app_settings) if app_settings.AUTH_ENABLED else None

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(permission_router)
    app.include_router(file_router, prefix=app_settings.MOUNT_PREFIX.rstrip("/"))

    # ── Core errors → HTTP ───────────────────────────────────────────
    @app.exception_handler(Unauthenticated)
    async def on_unauthenticated(request: Request, exc: Unauthenticated) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Invalid or expired token"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundOnDisk)
    async def on_not_found(request: Request, exc: NotFoundOnDisk) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Not Found"})

    @app.exception_handler(CorruptRecordError)
    async def on_corrupt_record(request: Request, exc: CorruptRecordError) -> JSONResponse:
        logger.error("%s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Permission record is corrupt"},
        )

    @app.exception_handler(StorageIOError)
    async def on_storage_error(request: Request, exc: StorageIOError) -> JSONResponse:
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Storage error"},
        )

    # ── Startup ──────────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup() -> None:
        box: Filebox = app.state.filebox
        box.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            "Serving %s at %s (auth %s)",
            box.base_dir,
            app_settings.MOUNT_PREFIX,
            "enabled" if app.state.auth else "disabled",
        )

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(status="ok", base_dir=str(app.state.filebox.base_dir))

    return app


app = create_app()
