from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sb2backup import __version__
from sb2backup.api.routes_health import router as health_router
from sb2backup.api.routes_upload import router as upload_router
from sb2backup.core.config import Settings, get_settings
from sb2backup.core.logging import setup_logging, teardown_logging
from sb2backup.core.request_context import request_logging_middleware
from sb2backup.db.paths import ensure_dir_writable
from sb2backup.ui import router as ui_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_file)
    logger.info("SQLite library version %s", sqlite3.sqlite_version)

    tmp_dir = settings.tmp_dir.resolve()
    try:
        ensure_dir_writable(tmp_dir)
    except RuntimeError as exc:
        logger.error("Upload directory check failed: %s | tmp_dir=%s", exc, tmp_dir)
        raise

    logger.info("Start")
    try:
        yield
    finally:
        logger.info("Stop")
        teardown_logging()


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = get_settings()
    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.middleware("http")(request_logging_middleware)
    app.include_router(health_router)
    app.include_router(upload_router)
    app.include_router(ui_router)
    return app


app = create_app()
