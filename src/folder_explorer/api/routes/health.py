from fastapi import APIRouter, Depends, Response, status

from folder_explorer.api.dependencies import get_cache, get_store
from folder_explorer.api.schemas import HealthResponse, ReadinessResponse
from folder_explorer.core.ports.cache import Cache
from folder_explorer.core.ports.store import EntityStore

router = APIRouter()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: is the process alive?"""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    store: EntityStore = Depends(get_store),
    cache: Cache = Depends(get_cache),
) -> ReadinessResponse:
    """Readiness probe: the database must answer; a down cache only degrades."""
    database_up = await store.ping()
    cache_up = await cache.ping()
    if not database_up:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(
        status="ok" if database_up and cache_up else "degraded",
        database="up" if database_up else "down",
        cache="up" if cache_up else "down",
    )
