"""SendGrid actions."""

from __future__ import annotations

import re
from typing import Any

from actionhub.actions.executor import execute_action
from actionhub.actions.types import ActionContext, FunctionDefinition, FunctionFactory
from actionhub.errors import ActionValidationError
from actionhub.integrations.http import request_json

SERVICE_NAME = "sendGridService"
SEND_URL = "https://api.sendgrid.com/v3/mail/send"

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def create_sendgrid_actions(context: ActionContext) -> FunctionFactory:
    async def send_email(args: dict[str, Any]):
        to = args.get("to", "")
        subject = args.get("subject", "")
        text = args.get("text", "")
        html = args.get("html", "")

        async def call() -> dict[str, Any]:
            if not context.company_id:
                raise ActionValidationError("Company ID is missing from context.")
            if not isinstance(to, str) or not _EMAIL_PATTERN.match(to):
                raise ActionValidationError(
                    "The provided email address is not valid.",
                    field_errors={"to": "invalid email"},
                )
            for field, value in (("subject", subject), ("text", text), ("html", html)):
                if not isinstance(value, str) or not value.strip():
                    raise ActionValidationError(
                        f"The {field} must be a non-empty string.",
                        field_errors={field: "required"},
                    )

            api_key = await context.get_api_key("sendgrid_api_key")
            sender = await context.get_api_key("sendgrid_from_email")
            if not api_key or not sender:
                return {"success": False, "error": "SendGrid is not configured for this company."}

            await request_json(
                "POST",
                SEND_URL,
                service_name=SERVICE_NAME,
                headers={"Authorization": f"Bearer {api_key}"},
                json_data={
                    "personalizations": [{"to": [{"email": to}]}],
                    "from": {"email": sender},
                    "subject": subject,
                    "content": [
                        {"type": "text/plain", "value": text},
                        {"type": "text/html", "value": html},
                    ],
                },
            )
            return {"success": True, "data": {"message": f"Email sent to {to}"}}

        return await execute_action(
            "send_email",
            call,
            service_name=SERVICE_NAME,
            success_message="Email sent successfully.",
        )

    return {
        "send_email": FunctionDefinition(
            description="Send an email using SendGrid",
            strict=True,
            parameters={
                "type": "object",
                "properties": {
                    "to": {"type": "string", "description": "The recipient email address"},
                    "subject": {"type": "string", "description": "The subject of the email"},
                    "text": {"type": "string", "description": "The plain text content of the email"},
                    "html": {"type": "string", "description": "The HTML content of the email"},
                },
                "required": ["to", "subject", "text", "html"],
                "additionalProperties": False,
            },
            function=send_email,
        ),
    }
