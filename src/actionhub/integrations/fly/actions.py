"""Fly.io actions using the Machines REST API."""

from __future__ import annotations

from typing import Any

from actionhub.actions.executor import execute_action
from actionhub.actions.types import ActionContext, FunctionDefinition, FunctionFactory
from actionhub.errors import ActionServiceError, ActionValidationError
from actionhub.integrations.http import request_json

SERVICE_NAME = "flyService"
API_URL = "https://api.machines.dev/v1"


def create_fly_actions(context: ActionContext) -> FunctionFactory:
    async def _headers() -> dict[str, str]:
        token = await context.get_api_key("fly_api_token")
        if not token:
            raise ActionServiceError("Fly.io is not configured for this company.", service_name=SERVICE_NAME)
        return {"Authorization": f"Bearer {token}"}

    def _app_name(args: dict[str, Any]) -> str:
        name = (args.get("app_name") or "").strip()
        if not name:
            raise ActionValidationError("app_name is required.", field_errors={"app_name": "required"})
        return name

    async def list_apps(args: dict[str, Any]):
        async def call():
            org = args.get("org_slug") or await context.get_api_key("fly_org_slug") or "personal"
            body = await request_json(
                "GET",
                f"{API_URL}/apps",
                service_name=SERVICE_NAME,
                headers=await _headers(),
                params={"org_slug": org},
            )
            return {"success": True, "data": body.get("apps", [])}

        return await execute_action(
            "list_apps",
            call,
            service_name=SERVICE_NAME,
            data_extractor=lambda res: [
                {
                    "name": app.get("name"),
                    "machine_count": app.get("machine_count"),
                    "url": f"https://{app.get('name')}.fly.dev",
                }
                for app in res["data"]
            ],
        )

    async def get_app(args: dict[str, Any]):
        async def call():
            name = _app_name(args)
            body = await request_json(
                "GET", f"{API_URL}/apps/{name}", service_name=SERVICE_NAME, headers=await _headers()
            )
            return {"success": True, "data": body}

        return await execute_action("get_app", call, service_name=SERVICE_NAME)

    async def list_machines(args: dict[str, Any]):
        async def call():
            name = _app_name(args)
            machines = await request_json(
                "GET",
                f"{API_URL}/apps/{name}/machines",
                service_name=SERVICE_NAME,
                headers=await _headers(),
            )
            return {"success": True, "data": machines or []}

        return await execute_action(
            "list_machines",
            call,
            service_name=SERVICE_NAME,
            data_extractor=lambda res: [
                {"id": m.get("id"), "state": m.get("state"), "region": m.get("region")}
                for m in res["data"]
            ],
        )

    async def _machine_command(args: dict[str, Any], command: str):
        async def call():
            name = _app_name(args)
            machine_id = (args.get("machine_id") or "").strip()
            if not machine_id:
                raise ActionValidationError(
                    "machine_id is required.", field_errors={"machine_id": "required"}
                )
            await request_json(
                "POST",
                f"{API_URL}/apps/{name}/machines/{machine_id}/{command}",
                service_name=SERVICE_NAME,
                headers=await _headers(),
            )
            return {"success": True, "data": {"machine_id": machine_id, "command": command}}

        return await execute_action(
            f"{command}_machine",
            call,
            service_name=SERVICE_NAME,
            success_message=f"Machine {command} requested.",
        )

    async def start_machine(args: dict[str, Any]):
        return await _machine_command(args, "start")

    async def stop_machine(args: dict[str, Any]):
        return await _machine_command(args, "stop")

    app_schema = {"type": "string", "description": "The name of the Fly.io app"}
    machine_schema = {
        "type": "object",
        "properties": {
            "app_name": app_schema,
            "machine_id": {"type": "string", "description": "The machine ID"},
        },
        "required": ["app_name", "machine_id"],
    }

    return {
        "list_apps": FunctionDefinition(
            description="List Fly.io apps in your organization with their URLs",
            parameters={
                "type": "object",
                "properties": {
                    "org_slug": {"type": "string", "description": "Organization slug (optional)"},
                },
            },
            function=list_apps,
        ),
        "get_app": FunctionDefinition(
            description="Get details about a Fly.io app",
            parameters={
                "type": "object",
                "properties": {"app_name": app_schema},
                "required": ["app_name"],
            },
            function=get_app,
        ),
        "list_machines": FunctionDefinition(
            description="List the machines of a Fly.io app",
            parameters={
                "type": "object",
                "properties": {"app_name": app_schema},
                "required": ["app_name"],
            },
            function=list_machines,
        ),
        "start_machine": FunctionDefinition(
            description="Start a stopped Fly.io machine",
            parameters=machine_schema,
            function=start_machine,
        ),
        "stop_machine": FunctionDefinition(
            description="Stop a running Fly.io machine",
            parameters=machine_schema,
            function=stop_machine,
        ),
    }
