"""FastAPI application factory with async lifespan for the registry, DB, and Redis."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from actionhub.actions.events import NullEventPublisher, RedisEventPublisher
from actionhub.api.v1.router import v1_router
from actionhub.config import Settings, get_settings
from actionhub.database import close_db, get_session_factory, init_db
from actionhub.integrations.builtin import register_builtin_integrations
from actionhub.integrations.discovery import DiscoveryService
from actionhub.integrations.registry import IntegrationRegistry
from actionhub.redis import close_redis, init_redis

logger = logging.getLogger(__name__)


def build_registry(settings: Settings) -> IntegrationRegistry:
    """Create the integration registry with the built-in providers registered."""
    registry = IntegrationRegistry(settings.integrations_path)
    register_builtin_integrations(registry)
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    On startup: build the integration registry and discovery service (the
    first scan happens here so descriptor errors show up in startup logs),
    then the database engine, session factory, Redis client, and event
    publisher.
    On shutdown: close Redis, then the database.
    """
    settings: Settings = app.state.settings

    # Startup -- Registry & discovery
    registry = build_registry(settings)
    registry.build_api_key_mapping()
    app.state.registry = registry
    app.state.discovery = DiscoveryService(registry, default_language=settings.default_language)

    # Startup -- Database & Redis
    engine = await init_db(settings.database_url, echo=settings.debug)
    app.state.db_engine = engine
    app.state.session_factory = get_session_factory(engine)
    app.state.redis = await init_redis(settings.redis_url) if settings.publish_action_events else None

    # Startup -- Action events (disabled when Redis is off or unreachable)
    if app.state.redis is not None:
        app.state.event_publisher = RedisEventPublisher(app.state.redis)
    else:
        app.state.event_publisher = NullEventPublisher()

    logger.info(
        "actionhub started with %d integrations from %s",
        len(registry.iter_registered()),
        settings.integrations_path,
    )

    yield

    # Shutdown (reverse order: redis -> db)
    await close_redis(app.state.redis)
    await close_db(engine)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the app factory. Uvicorn calls it with the --factory flag:
        uvicorn actionhub.app:create_app --factory
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="actionhub",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    app.include_router(v1_router, prefix=settings.api_prefix)

    return app
