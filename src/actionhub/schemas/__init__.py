"""Pydantic schemas for integration descriptors, catalog records, and API models."""

from actionhub.schemas.action import (
    ActionExecutionEvent,
    DispatchError,
    DispatchResult,
    FunctionCall,
    StandardActionResult,
)
from actionhub.schemas.integration import (
    ActionInfo,
    Integration,
    IntegrationConfig,
    RequiredApiKey,
)
from actionhub.schemas.jsonapi import (
    JSONAPIListResponse,
    JSONAPIResource,
    JSONAPISingleResponse,
)

__all__ = [
    "ActionExecutionEvent",
    "ActionInfo",
    "DispatchError",
    "DispatchResult",
    "FunctionCall",
    "Integration",
    "IntegrationConfig",
    "JSONAPIListResponse",
    "JSONAPIResource",
    "JSONAPISingleResponse",
    "RequiredApiKey",
    "StandardActionResult",
]
