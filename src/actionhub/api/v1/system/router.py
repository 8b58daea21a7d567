"""System router providing health check and registry maintenance endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import text

from actionhub.api.deps import get_registry
from actionhub.integrations.registry import IntegrationRegistry
from actionhub.schemas.jsonapi import JSONAPIResource, JSONAPISingleResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=JSONAPISingleResponse)
async def health_check(request: Request) -> JSONAPISingleResponse:
    """Return system health status including database, Redis, and registry state.

    Reports ``healthy`` when the database is reachable and ``degraded``
    otherwise. Redis only carries best-effort action events, so its absence
    is reported but does not degrade the status.
    """
    db_ok = False
    try:
        session_factory = request.app.state.session_factory
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        logger.warning("Database health check failed", exc_info=True)

    redis_ok = False
    redis_client = request.app.state.redis
    if redis_client is not None:
        try:
            await redis_client.ping()
            redis_ok = True
        except Exception:
            logger.warning("Redis health check failed", exc_info=True)

    registry: IntegrationRegistry = request.app.state.registry

    return JSONAPISingleResponse(
        data=JSONAPIResource(
            type="system-health",
            id="current",
            attributes={
                "status": "healthy" if db_ok else "degraded",
                "database": "connected" if db_ok else "disconnected",
                "redis": "connected" if redis_ok else "disconnected",
                "integrations": len(registry.iter_registered()),
            },
        )
    )


@router.post("/registry/reload", response_model=JSONAPISingleResponse)
async def reload_registry(
    request: Request,
    registry: IntegrationRegistry = Depends(get_registry),
) -> JSONAPISingleResponse:
    """Drop the registry cache and rescan integration descriptors (debug only)."""
    if not request.app.state.settings.debug:
        raise HTTPException(status_code=403, detail="Registry reload is only available in debug mode")

    registry.clear_cache()
    configs = registry.get_all_integration_configs()
    return JSONAPISingleResponse(
        data=JSONAPIResource(
            type="integration-registry",
            id="current",
            attributes={
                "integrations": sorted(configs),
                "api_keys": len(registry.get_all_registered_api_keys()),
            },
        )
    )
