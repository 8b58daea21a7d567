"""JSONBin actions: create, read, update, and clone JSON documents."""

from __future__ import annotations

from typing import Any

from actionhub.actions.executor import execute_action
from actionhub.actions.types import ActionContext, FunctionDefinition, FunctionFactory
from actionhub.errors import ActionServiceError, ActionValidationError
from actionhub.integrations.http import request_json

SERVICE_NAME = "jsonBinService"
BASE_URL = "https://api.jsonbin.io/v3/b"


def create_jsonbin_actions(context: ActionContext) -> FunctionFactory:
    async def _headers() -> dict[str, str]:
        api_key = await context.get_api_key("jsonbin_api_key")
        if not api_key:
            raise ActionServiceError(
                "JSONBin is not configured for this company.", service_name=SERVICE_NAME
            )
        return {"X-Master-Key": api_key, "Content-Type": "application/json"}

    def _require(args: dict[str, Any], name: str) -> Any:
        value = args.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ActionValidationError(f"{name} is required.", field_errors={name: "required"})
        return value

    async def create_file(args: dict[str, Any]):
        async def call():
            content = _require(args, "content")
            headers = await _headers()
            if args.get("name"):
                headers["X-Bin-Name"] = str(args["name"])
            body = await request_json(
                "POST", BASE_URL, service_name=SERVICE_NAME, headers=headers, json_data=content
            )
            return {"success": True, "data": body}

        return await execute_action(
            "create_file",
            call,
            service_name=SERVICE_NAME,
            data_extractor=lambda res: {"id": res["data"]["metadata"]["id"]},
            success_message="File created.",
        )

    async def read_file(args: dict[str, Any]):
        async def call():
            file_id = _require(args, "file_id")
            body = await request_json(
                "GET",
                f"{BASE_URL}/{file_id}/latest",
                service_name=SERVICE_NAME,
                headers=await _headers(),
            )
            return {"success": True, "data": body}

        return await execute_action(
            "read_file",
            call,
            service_name=SERVICE_NAME,
            data_extractor=lambda res: res["data"]["record"],
        )

    async def update_file(args: dict[str, Any]):
        async def call():
            file_id = _require(args, "file_id")
            content = _require(args, "content")
            body = await request_json(
                "PUT",
                f"{BASE_URL}/{file_id}",
                service_name=SERVICE_NAME,
                headers=await _headers(),
                json_data=content,
            )
            return {"success": True, "data": body}

        return await execute_action(
            "update_file",
            call,
            service_name=SERVICE_NAME,
            data_extractor=lambda res: res["data"]["record"],
            success_message="File updated.",
        )

    async def clone_file(args: dict[str, Any]):
        async def call():
            file_id = _require(args, "file_id")
            headers = await _headers()
            original = await request_json(
                "GET", f"{BASE_URL}/{file_id}/latest", service_name=SERVICE_NAME, headers=headers
            )
            created = await request_json(
                "POST",
                BASE_URL,
                service_name=SERVICE_NAME,
                headers=headers,
                json_data=original["record"],
            )
            return {"success": True, "data": {"id": created["metadata"]["id"], "source": file_id}}

        return await execute_action(
            "clone_file", call, service_name=SERVICE_NAME, success_message="File cloned."
        )

    file_id_schema = {"type": "string", "description": "The ID of the JSONBin file"}
    content_schema = {"type": "object", "description": "The JSON content of the file"}

    return {
        "create_file": FunctionDefinition(
            description="Create a new file in JSONBin",
            parameters={
                "type": "object",
                "properties": {
                    "content": content_schema,
                    "name": {"type": "string", "description": "Optional name of the file"},
                },
                "required": ["content"],
            },
            function=create_file,
        ),
        "read_file": FunctionDefinition(
            description="Read a file from JSONBin",
            parameters={
                "type": "object",
                "properties": {"file_id": file_id_schema},
                "required": ["file_id"],
            },
            function=read_file,
        ),
        "update_file": FunctionDefinition(
            description="Replace the content of a file in JSONBin",
            parameters={
                "type": "object",
                "properties": {"file_id": file_id_schema, "content": content_schema},
                "required": ["file_id", "content"],
            },
            function=update_file,
        ),
        "clone_file": FunctionDefinition(
            description="Clone a JSONBin file",
            parameters={
                "type": "object",
                "properties": {"file_id": file_id_schema},
                "required": ["file_id"],
            },
            function=clone_file,
        ),
    }
