# main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from user_registration.config import Settings, build_sqlalchemy_db_url, get_settings
from user_registration.db.migrations import provision_schema
from user_registration.errors import register_exception_handlers
from user_registration.routers import auth, dashboard, health
from user_registration.services.user_store import UserStore


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("user_registration").setLevel(level)


def create_app(settings: Settings | None = None, store: UserStore | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    db_url = build_sqlalchemy_db_url(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        user_store = store or UserStore.from_url(db_url)
        try:
            provision_schema(user_store.engine, db_url)
        except Exception:  # noqa: BLE001 - keep serving; requests will report the broken schema
            logger.exception("Schema provisioning failed; continuing without a verified schema")
        try:
            Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.exception("Could not create upload directory %s", settings.upload_dir)
        app.state.user_store = user_store
        try:
            yield
        finally:
            user_store.close()

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)

    application.include_router(health.router)
    application.include_router(auth.router, tags=["auth"])
    application.include_router(dashboard.router, tags=["dashboard"])

    # The upload directory is created during startup, after this mount is declared.
    application.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
    if Path(settings.public_dir).is_dir():
        application.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")
    return application


app = create_app()
