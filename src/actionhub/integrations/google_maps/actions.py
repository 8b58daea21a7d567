"""Google Maps actions backed by the Geocoding and Places web services."""

from __future__ import annotations

from typing import Any

from actionhub.actions.executor import execute_action
from actionhub.actions.types import ActionContext, FunctionDefinition, FunctionFactory
from actionhub.errors import ActionServiceError, ActionValidationError
from actionhub.integrations.http import request_json

SERVICE_NAME = "googleMapsService"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
PLACES_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"

# Statuses that mean "the request worked", as opposed to quota/auth errors.
_OK_STATUSES = {"OK", "ZERO_RESULTS"}


def _place_summary(result: dict[str, Any]) -> dict[str, Any]:
    location = result.get("geometry", {}).get("location", {})
    return {
        "name": result.get("name"),
        "address": result.get("formatted_address"),
        "place_id": result.get("place_id"),
        "lat": location.get("lat"),
        "lng": location.get("lng"),
        "rating": result.get("rating"),
    }


def create_google_maps_actions(context: ActionContext) -> FunctionFactory:
    async def _get(url: str, params: dict[str, Any]) -> dict[str, Any]:
        api_key = await context.get_api_key("google_maps_api_key")
        if not api_key:
            return {"success": False, "error": "Google Maps is not configured for this company."}

        body = await request_json(
            "GET", url, service_name=SERVICE_NAME, params={**params, "key": api_key}
        )
        status = body.get("status")
        if status not in _OK_STATUSES:
            raise ActionServiceError(
                body.get("error_message") or f"Google Maps returned {status}",
                service_name=SERVICE_NAME,
                service_response=body,
            )
        return {"success": True, "data": body.get("results", [])}

    async def geocode_address(args: dict[str, Any]):
        async def call():
            address = (args.get("address") or "").strip()
            if not address:
                raise ActionValidationError("address is required.", field_errors={"address": "required"})
            return await _get(GEOCODE_URL, {"address": address})

        return await execute_action(
            "geocode_address",
            call,
            service_name=SERVICE_NAME,
            data_extractor=lambda res: [_place_summary(r) for r in res["data"]],
        )

    async def search_places(args: dict[str, Any]):
        async def call():
            query = (args.get("query") or "").strip()
            if not query:
                raise ActionValidationError("query is required.", field_errors={"query": "required"})
            params: dict[str, Any] = {"query": query}
            if args.get("language"):
                params["language"] = args["language"]
            return await _get(PLACES_URL, params)

        limit = args.get("limit") or 5
        return await execute_action(
            "search_places",
            call,
            service_name=SERVICE_NAME,
            data_extractor=lambda res: [_place_summary(r) for r in res["data"][:limit]],
        )

    return {
        "geocode_address": FunctionDefinition(
            description="Convert an address into coordinates",
            parameters={
                "type": "object",
                "properties": {
                    "address": {"type": "string", "description": "The address to geocode"},
                },
                "required": ["address"],
            },
            function=geocode_address,
        ),
        "search_places": FunctionDefinition(
            description="Search for places matching a text query",
            parameters={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "e.g. 'coffee near Dizengoff'"},
                    "language": {"type": "string", "description": "Result language code"},
                    "limit": {"type": "integer", "description": "Maximum results (default 5)"},
                },
                "required": ["query"],
            },
            function=search_places,
        ),
    }
