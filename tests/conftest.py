"""Shared fixtures: on-disk integration trees with in-memory action creators."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from actionhub.actions.types import ActionContext, FunctionDefinition, FunctionFactory
from actionhub.integrations.discovery import DiscoveryService
from actionhub.integrations.registry import IntegrationRegistry


def write_integration(
    root: Path,
    folder: str,
    config: dict[str, Any] | str,
    *,
    actions_file: str = "actions.py",
    translations: dict[str, dict[str, Any]] | None = None,
) -> Path:
    """Create an integration folder with a descriptor and an actions module."""
    path = root / folder
    path.mkdir(parents=True)
    raw = config if isinstance(config, str) else json.dumps(config)
    (path / "integration.config.json").write_text(raw, encoding="utf-8")
    if actions_file:
        (path / actions_file).write_text("# actions\n", encoding="utf-8")
    for language, table in (translations or {}).items():
        (path / "translations").mkdir(exist_ok=True)
        (path / "translations" / f"{language}.json").write_text(
            json.dumps(table), encoding="utf-8"
        )
    return path


class CallRecorder:
    """Collects the contexts and arguments actions were invoked with."""

    def __init__(self) -> None:
        self.contexts: list[ActionContext] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []


def make_sendgrid_creator(recorder: CallRecorder):
    def create_sendgrid_actions(context: ActionContext) -> FunctionFactory:
        recorder.contexts.append(context)

        async def send_email(args: dict[str, Any]):
            recorder.calls.append(("send_email", args))
            return {"sent_to": args.get("to"), "company_id": context.company_id}

        async def explode(args: dict[str, Any]):
            raise RuntimeError("boom")

        return {
            "send_email": FunctionDefinition(
                description="Send an email using SendGrid",
                strict=True,
                parameters={
                    "type": "object",
                    "properties": {"to": {"type": "string"}},
                    "required": ["to"],
                },
                function=send_email,
            ),
            "explode": FunctionDefinition(description="Always fails", function=explode),
            "helper": FunctionDefinition(description="", function=send_email),
        }

    return create_sendgrid_actions


def create_maps_actions(context: ActionContext) -> FunctionFactory:
    async def geocode(args: dict[str, Any]):
        return {"lat": 32.08, "lng": 34.78}

    return {
        "geocode": FunctionDefinition(description="Geocode an address", function=geocode),
    }


SENDGRID_CONFIG = {
    "name": "SendGrid",
    "icon": "mail",
    "category": "communication",
    "actionCreator": "create_sendgrid_actions",
    "requiredApiKeys": [
        {"key": "sendgrid_api_key", "label": "API Key", "type": "secret"},
    ],
}

MAPS_CONFIG = {
    "name": "Google Maps",
    "description": "Maps and places",
    "actionCreator": "create_maps_actions",
    "requiredApiKeys": [
        {"key": "google_maps_api_key", "label": "API Key", "type": "secret"},
    ],
}


@pytest.fixture
def recorder() -> CallRecorder:
    return CallRecorder()


@pytest.fixture
def integrations_root(tmp_path: Path) -> Path:
    root = tmp_path / "integrations"
    root.mkdir()
    write_integration(
        root,
        "sendgrid",
        SENDGRID_CONFIG,
        translations={
            "he": {
                "serviceName": "סנדגריד",
                "send_email": {"actionTitle": "שליחת אימייל", "description": "שליחת אימייל"},
            }
        },
    )
    write_integration(root, "google_maps", MAPS_CONFIG)
    return root


@pytest.fixture
def registry(integrations_root: Path, recorder: CallRecorder) -> IntegrationRegistry:
    registry = IntegrationRegistry(integrations_root)
    registry.register_provider("sendgrid", make_sendgrid_creator(recorder))
    registry.register_provider("google_maps", create_maps_actions)
    return registry


@pytest.fixture
def discovery(registry: IntegrationRegistry) -> DiscoveryService:
    return DiscoveryService(registry)
