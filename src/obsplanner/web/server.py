"""
HTTP API server for obsplanner.

``create_app`` builds the FastAPI application with its routers, CORS, error
mapping and the shared services (event store, subscription registry, clock)
on ``app.state``. ``run_server`` serves it with uvicorn.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..infra.exceptions import (
    ConstraintError,
    IngestError,
    NotFoundError,
    PlannerError,
    ValidationError,
)
from ..infra.logging import configure_logging
from ..infra.settings import settings
from ..runtime.clock import Clock, SystemClock
from ..runtime.subscriptions import SubscriptionRegistry
from ..usecases.events import EventStore
from .api import blocks, events, planning, resources

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[PlannerError], int], ...] = (
    (ValidationError, 400),
    (IngestError, 400),
    (NotFoundError, 404),
    (ConstraintError, 409),
)


def _status_for(exc: PlannerError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def create_app(
    *,
    event_store: EventStore | None = None,
    registry: SubscriptionRegistry | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    app = FastAPI(title="OBS Planner API")

    app.state.registry = registry or SubscriptionRegistry()
    app.state.event_store = event_store or EventStore(registry=app.state.registry)
    app.state.clock = clock or SystemClock()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(PlannerError)
    async def planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
        status = _status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("%s %s failed", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(events.router)
    app.include_router(resources.router)
    app.include_router(blocks.router)
    app.include_router(planning.router)
    return app


def run_server(host: str | None = None, port: int | None = None) -> None:
    configure_logging()
    app = create_app()
    try:
        uvicorn.run(app, host=host or settings.http_host, port=port or settings.http_port)
    finally:
        app.state.registry.close()
