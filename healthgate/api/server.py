"""FastAPI server exposing the health engine."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from healthgate.api.health_routes import health_router
from healthgate.config import settings
from healthgate.health.catalog import build_registry
from healthgate.health.engine import HealthEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the probe registry and engine on startup.

    Catalog errors (duplicate names, unknown probe types) propagate and
    abort startup.
    """
    if getattr(app.state, "health_engine", None) is None:
        registry = build_registry(settings)
        app.state.health_engine = HealthEngine(
            registry, timeout=settings.probe_timeout_seconds,
        )
        logger.info(
            "Health engine ready: %d probes, timeout=%.1fs",
            len(registry), settings.probe_timeout_seconds,
        )

    yield


def create_app(engine: HealthEngine | None = None) -> FastAPI:
    app = FastAPI(
        title="healthgate",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.health_engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Application is running!"

    return app
