"""Tracker Service: exposes the live NAV / price window to dashboards."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from navtracker.api.health import check_all_dependencies, check_readiness
from navtracker.core.config import settings
from navtracker.core.dependencies import services
from navtracker.core.exceptions import SchedulerError
from navtracker.models.sample import SessionSnapshot

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    await services.initialize()
    logger.info("Tracker Service started")
    yield
    await services.shutdown()
    logger.info("Tracker Service stopped")


app = FastAPI(title="Tracker Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/snapshot", response_model=SessionSnapshot)
async def get_snapshot() -> SessionSnapshot:
    """
    Get the current sample window and session status.

    Returns:
        Read-only session snapshot.
    """
    return services.tracker.snapshot()


@app.post("/api/retry", response_model=SessionSnapshot)
async def retry() -> SessionSnapshot:
    """
    Force an immediate sampling cycle.

    Returns:
        Snapshot after the cycle completed.
    """
    try:
        return await services.tracker.retry()
    except SchedulerError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/api/mock", response_model=SessionSnapshot)
async def enable_mock_data() -> SessionSnapshot:
    """
    Switch to synthetic data for the rest of the run.

    Returns:
        Snapshot holding the synthetic samples.
    """
    try:
        return services.tracker.enable_mock_data()
    except SchedulerError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.get("/health")
async def health() -> dict:
    """
    Health check endpoint with dependency verification.

    Returns:
        Health status with upstream endpoints.
    """
    result = await check_all_dependencies(services.tracker, services.fetcher)
    return {"service": settings.service_name, **result}


@app.get("/ready")
async def readiness() -> dict:
    """
    Readiness check endpoint.

    Returns:
        Readiness status.
    """
    result = await check_readiness(services.tracker)
    return {"service": settings.service_name, **result}


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
