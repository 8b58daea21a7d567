"""Shared FastAPI dependencies for the registry, discovery, dispatch, and identity."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from actionhub.actions.dispatcher import Dispatcher
from actionhub.integrations.discovery import DiscoveryService
from actionhub.integrations.registry import IntegrationRegistry
from actionhub.schemas.integration import SUPPORTED_LANGUAGES
from actionhub.services.api_key_service import ApiKeyService
from actionhub.services.session_service import SessionService


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session from the app-level session factory.

    The session factory is stored on ``request.app.state.session_factory``
    by the application lifespan. The session auto-closes when the request ends.
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_registry(request: Request) -> IntegrationRegistry:
    """Return the IntegrationRegistry built by the application lifespan."""
    return request.app.state.registry


async def get_discovery(request: Request) -> DiscoveryService:
    """Return the DiscoveryService built by the application lifespan."""
    return request.app.state.discovery


async def get_api_key_service(
    db: AsyncSession = Depends(get_db),
    registry: IntegrationRegistry = Depends(get_registry),
) -> ApiKeyService:
    """Provide an ApiKeyService with the current DB session."""
    return ApiKeyService(db, registry)


async def get_dispatcher(
    request: Request,
    db: AsyncSession = Depends(get_db),
    discovery: DiscoveryService = Depends(get_discovery),
) -> Dispatcher:
    """Provide a Dispatcher bound to this request's DB session.

    Session lookup and credentials share the request's session; events go to
    the app-wide publisher.
    """
    return Dispatcher(
        discovery=discovery,
        session_resolver=SessionService(db),
        credentials=ApiKeyService(db),
        publisher=request.app.state.event_publisher,
    )


async def get_company_id(x_company_id: str | None = Header(default=None)) -> str:
    """Return the caller's company from ``X-Company-Id``.

    Authentication happens upstream; this only requires the identity header.
    """
    if not x_company_id:
        raise HTTPException(status_code=400, detail="Company ID is required")
    return x_company_id


async def get_language(
    request: Request,
    language: str | None = Query(default=None),
) -> str:
    """Validate the ``language`` query parameter, defaulting to the configured language."""
    language = language or request.app.state.settings.default_language
    if language not in SUPPORTED_LANGUAGES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported language. Use one of: {', '.join(SUPPORTED_LANGUAGES)}",
        )
    return language
