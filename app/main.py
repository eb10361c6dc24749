from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api import API_VERSION, router
from app.web import router as web_router
from datastore.base import MeasurementStore, StoreError
from datastore.factory import build_default_store
from logging_config import configure_logging
from services.seeder import SeedGenerator
from settings import get_settings

logger = logging.getLogger(__name__)


def prepare_store(store: MeasurementStore, auto_seed: bool) -> None:
    """Index and bootstrap the store; failures are logged, never fatal."""
    logger.info("Using measurement store", extra={"backend": store.backend})
    if not store.is_connected():
        logger.error(
            "Measurement store is unreachable; API calls will fail until it recovers",
            extra={"backend": store.backend, "database": "disconnected"},
        )
        return

    logger.info("Measurement store connected", extra={"database": "connected"})
    try:
        store.ensure_indexes()
        if auto_seed:
            SeedGenerator(store).bootstrap()
    except StoreError as exc:
        logger.error("Startup seeding failed", extra={"error": str(exc)})


def create_app(
    store: Optional[MeasurementStore] = None,
    auto_seed: Optional[bool] = None,
) -> FastAPI:
    configure_logging()
    settings = get_settings()
    seed_on_start = settings.auto_seed if auto_seed is None else auto_seed

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = store is None
        active = build_default_store() if owned else store
        app.state.store = active
        prepare_store(active, seed_on_start)
        try:
            yield
        finally:
            if owned:
                active.close()
                build_default_store.cache_clear()

    app = FastAPI(
        title="Measurement Analytics",
        description="Time-series environmental measurements with aggregates and a dashboard.",
        version=API_VERSION,
        lifespan=lifespan,
    )
    allow_any = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_any else list(settings.cors_origins),
        allow_credentials=not allow_any,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    static_dir = Path(__file__).resolve().parent.parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logger.info("Starting server on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
