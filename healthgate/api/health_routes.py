"""Health endpoints.

Endpoints:
  GET  /health               liveness view (probes tagged ``live``)
  GET  /health/ready         readiness view (probes tagged ``ready``)
  GET  /health/tags/{tag}    any tag-filtered view
  GET  /health/checks        registered probes and their tags
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from healthgate.config import settings
from healthgate.health.engine import HealthEngine
from healthgate.health.models import AggregatedReport
from healthgate.health.report import NO_CACHE_HEADERS, http_status_for, report_to_dict

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["health"])


def _engine(request: Request) -> HealthEngine:
    return request.app.state.health_engine


def _respond(report: AggregatedReport) -> JSONResponse:
    return JSONResponse(
        content=report_to_dict(report),
        status_code=http_status_for(report.status),
        headers=NO_CACHE_HEADERS,
    )


# Sync handlers: FastAPI runs them in its threadpool, so a slow probe batch
# never blocks the event loop.


@health_router.get("/health")
def liveness(request: Request) -> JSONResponse:
    """Whether the process itself is up."""
    return _respond(_engine(request).query_tag(settings.live_tag))


@health_router.get("/health/ready")
def readiness(request: Request) -> JSONResponse:
    """Whether the process may receive traffic."""
    return _respond(_engine(request).query_tag(settings.ready_tag))


@health_router.get("/health/tags/{tag}")
def tag_view(tag: str, request: Request) -> JSONResponse:
    return _respond(_engine(request).query_tag(tag))


@health_router.get("/health/checks")
def list_checks(request: Request) -> dict[str, Any]:
    registry = _engine(request).registry
    return {"checks": registry.to_dict(), "count": len(registry)}
