"""Integration discovery and action trigger endpoints.

Discovery endpoints return catalog records as JSON:API resources. The
trigger endpoint dispatches a single action through the Dispatcher and
translates failed ``StandardActionResult`` payloads into HTTP errors using
their declared ``statusCode``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel, Field

from actionhub.actions.dispatcher import Dispatcher, not_implemented_message
from actionhub.actions.naming import to_snake_case
from actionhub.actions.types import ActionContext
from actionhub.api.deps import get_company_id, get_discovery, get_dispatcher, get_language
from actionhub.integrations.discovery import DiscoveryService
from actionhub.schemas.action import FunctionCall, StandardActionResult
from actionhub.schemas.integration import ActionInfo, Integration
from actionhub.schemas.jsonapi import (
    JSONAPIListResponse,
    JSONAPIResource,
    JSONAPISingleResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class TriggerActionRequest(BaseModel):
    """Request body for triggering an action: the action's arguments."""

    data: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Attribute mapping helpers
# ---------------------------------------------------------------------------


def _action_resource(action: ActionInfo) -> JSONAPIResource:
    """Build a JSON:API resource object from an ActionInfo."""
    return JSONAPIResource(
        type="actions",
        id=action.id,
        attributes=action.model_dump(by_alias=True, exclude={"id"}),
    )


def _integration_resource(integration: Integration) -> JSONAPIResource:
    """Build a JSON:API resource object from an Integration."""
    return JSONAPIResource(
        type="integrations",
        id=integration.id,
        attributes=integration.model_dump(by_alias=True, exclude={"id"}),
    )


def _lean_resource(index: int, item: dict[str, Any]) -> JSONAPIResource:
    return JSONAPIResource(
        type="integrations",
        id=str(item.get("id", index)),
        attributes={key: value for key, value in item.items() if key != "id"},
    )


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


@router.get("/discover")
async def discover_actions(
    language: str = Depends(get_language),
    discovery: DiscoveryService = Depends(get_discovery),
) -> JSONAPIListResponse:
    """List every action across all registered integrations."""
    actions = await discovery.discover_actions(language)
    return JSONAPIListResponse(
        data=[_action_resource(a) for a in actions],
        meta={"count": len(actions), "language": language},
    )


@router.get("/discover/lean")
async def discover_lean(
    fields: str | None = Query(default=None),
    language: str = Depends(get_language),
    discovery: DiscoveryService = Depends(get_discovery),
) -> JSONAPIListResponse:
    """List integrations projected onto ``fields`` (comma-separated)."""
    field_list = [f.strip() for f in fields.split(",") if f.strip()] if fields else None
    items = await discovery.get_integrations_lean(language, field_list)
    return JSONAPIListResponse(
        data=[_lean_resource(i, item) for i, item in enumerate(items)],
        meta={"count": len(items), "language": language},
    )


@router.get("/discover/action/{action_id}")
async def discover_action(
    action_id: str,
    language: str = Depends(get_language),
    discovery: DiscoveryService = Depends(get_discovery),
) -> JSONAPISingleResponse:
    """Get a single action by its fully-qualified id."""
    action = await discovery.discover_action_by_id(action_id, language)
    if action is None:
        raise HTTPException(status_code=404, detail="Action not found")
    return JSONAPISingleResponse(data=_action_resource(action))


# ---------------------------------------------------------------------------
# Trigger
# ---------------------------------------------------------------------------


@router.post("/actions/{integration_name}/{action_name}")
async def trigger_action(
    integration_name: str,
    action_name: str,
    body: TriggerActionRequest,
    company_id: str = Depends(get_company_id),
    language: str = Depends(get_language),
    x_session_id: str | None = Header(default=None),
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> Any:
    """Run one action and return its result.

    With ``X-Session-Id`` the call resolves that session's context;
    otherwise it runs statelessly for the company.
    """
    action_id = f"{to_snake_case(integration_name)}.{action_name}"
    call = FunctionCall.build(action_id, json.dumps(body.data))

    if x_session_id:
        outcome = await dispatcher.execute_function_call(
            call, x_session_id, company_id, [action_id]
        )
    else:
        context = ActionContext(company_id=company_id, language=language, is_stateless=True)
        outcome = await dispatcher.execute_function_call_with_context(
            call, context, [action_id]
        )

    if outcome.error is not None:
        status_code = 404 if outcome.error.message == not_implemented_message(action_id) else 500
        raise HTTPException(status_code=status_code, detail=outcome.error.message)

    result = outcome.result
    if isinstance(result, StandardActionResult):
        if not result.success:
            raise HTTPException(
                status_code=result.status_code or 500,
                detail=result.description or result.message or "Action failed",
            )
        return result.model_dump(by_alias=True, exclude_none=True)
    return result


# ---------------------------------------------------------------------------
# Integration lookup (declared last: the path parameter matches anything)
# ---------------------------------------------------------------------------


@router.get("/{integration_id}")
async def get_integration(
    integration_id: str,
    language: str = Depends(get_language),
    discovery: DiscoveryService = Depends(get_discovery),
) -> JSONAPISingleResponse:
    """Get a single integration with its actions."""
    integration = await discovery.get_integration_by_id(integration_id, language)
    if integration is None:
        raise HTTPException(status_code=404, detail="Integration not found")
    return JSONAPISingleResponse(data=_integration_resource(integration))
