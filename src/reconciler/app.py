from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from shared.logging import get_logger, setup_logging

from . import __version__
from .config import ReconcilerSettings, get_settings
from .repository import build_store
from .repository.contacts import ContactStore
from .routes import contacts, identify
from .services.identify import IdentifyService

logger = get_logger("reconciler.app")


def create_app(
    settings: ReconcilerSettings | None = None,
    store: ContactStore | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    store = store or build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.log_level)
        store.open()
        logger.info(
            "reconciler_ready",
            service=settings.service_name,
            store=type(store).__name__,
            debug_routes=settings.enable_debug_routes,
        )
        try:
            yield
        finally:
            store.close()
            logger.info("reconciler_stopped", service=settings.service_name)

    app = FastAPI(title="Identity Reconciliation Service", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.identify_service = IdentifyService.from_settings(store, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse, tags=["system"])
    async def root() -> str:
        return "Identity Reconciliation Service is running"

    @app.get("/v1/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok", "service": settings.service_name}

    app.include_router(identify.router)
    if settings.enable_debug_routes:
        app.include_router(contacts.router)

    return app


__all__ = ["create_app"]
