"""Debug actions for inspecting what an action sees at dispatch time."""

from __future__ import annotations

from typing import Any

from actionhub.actions.executor import execute_action
from actionhub.actions.types import ActionContext, FunctionDefinition, FunctionFactory
from actionhub.errors import ActionServiceError, ActionValidationError

SERVICE_NAME = "debugService"


def create_debug_actions(context: ActionContext) -> FunctionFactory:
    async def get_session_info(args: dict[str, Any]):
        async def call():
            return {
                "success": True,
                "data": {
                    "session_id": context.session_id,
                    "company_id": context.company_id,
                    "user_id": context.user_id,
                    "language": context.language,
                    "is_stateless": context.is_stateless,
                    "has_credentials": context.credentials is not None,
                },
            }

        return await execute_action("get_session_info", call, service_name=SERVICE_NAME)

    async def echo(args: dict[str, Any]):
        async def call():
            return {"success": True, "data": args}

        return await execute_action("echo", call, service_name=SERVICE_NAME)

    async def simulate_failure(args: dict[str, Any]):
        kind = args.get("kind", "unexpected")

        async def call():
            if kind == "validation":
                raise ActionValidationError("Simulated validation failure", field_errors={"kind": kind})
            if kind == "service":
                raise ActionServiceError("Simulated service failure", service_name=SERVICE_NAME)
            if kind == "reported":
                return {"success": False, "description": "Simulated reported failure"}
            raise RuntimeError("Simulated unexpected failure")

        return await execute_action("simulate_failure", call, service_name=SERVICE_NAME)

    return {
        "get_session_info": FunctionDefinition(
            description="Get basic session info for debug purposes",
            parameters={"type": "object", "properties": {}},
            function=get_session_info,
        ),
        "echo": FunctionDefinition(
            description="Return the arguments unchanged",
            parameters={"type": "object", "properties": {}, "additionalProperties": True},
            function=echo,
        ),
        "simulate_failure": FunctionDefinition(
            description="Fail on purpose to exercise error handling",
            parameters={
                "type": "object",
                "properties": {
                    "kind": {
                        "type": "string",
                        "enum": ["validation", "service", "reported", "unexpected"],
                    },
                },
            },
            function=simulate_failure,
        ),
    }
