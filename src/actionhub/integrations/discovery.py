"""Discovery service building the localized integration/action catalog.

The catalog is rebuilt on every call by invoking each registered provider
with an empty ``ActionContext``. Providers are pure closures, so this is
cheap and never touches credentials or the network. Translation files are
read through the registry, which caches them until ``clear_cache()``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from actionhub.actions.naming import to_snake_case
from actionhub.integrations.registry import IntegrationRegistry, RegisteredIntegration
from actionhub.schemas.integration import (
    DEFAULT_ICON,
    LEAN_INTEGRATION_FIELDS,
    ActionInfo,
    Integration,
)

logger = logging.getLogger(__name__)


def _integration_id(entry: RegisteredIntegration) -> str:
    """Snake-cased config name, falling back to the folder name.

    Raises:
        ValueError: If neither yields a usable identifier.
    """
    integration_id = to_snake_case(entry.config.name) or to_snake_case(entry.folder)
    if not integration_id:
        raise ValueError(f"Cannot derive an integration id for folder {entry.folder!r}")
    return integration_id


def _lean_action(action: ActionInfo) -> dict[str, str]:
    return {"id": action.id, "title": action.action_title, "description": action.description}


class DiscoveryService:
    """Builds ``Integration``/``ActionInfo`` catalogs from a registry.

    Args:
        registry: Registry holding descriptors and action providers.
        default_language: Language used when callers pass none.
    """

    def __init__(self, registry: IntegrationRegistry, default_language: str = "en") -> None:
        self.registry = registry
        self.default_language = default_language

    def _build_integration(
        self, entry: RegisteredIntegration, language: str
    ) -> Integration:
        config = entry.config
        actions = entry.provider.describe()
        translations = self.registry.get_translations(entry.folder, language)

        integration_id = _integration_id(entry)
        service_name = translations.service_name or config.name or entry.folder
        icon = config.icon or DEFAULT_ICON

        infos: list[ActionInfo] = []
        for key, definition in actions.items():
            if not getattr(definition, "description", None):
                logger.info("Skipped invalid action %s in %s", key, entry.folder)
                continue
            overrides = translations.for_action(key)
            infos.append(
                ActionInfo(
                    id=f"{integration_id}.{key}",
                    service_name=service_name,
                    action_title=overrides.get("actionTitle") or key,
                    description=overrides.get("description") or definition.description,
                    icon=icon,
                    service=integration_id,
                    parameters=definition.parameters,
                )
            )

        return Integration(
            id=integration_id,
            name=service_name,
            display_name=config.display_name or translations.service_name or config.name,
            description=translations.service_description or config.description or "",
            icon=icon,
            category=config.category,
            actions=infos,
            required_api_keys=list(config.required_api_keys),
        )

    async def discover_integrations(self, language: str | None = None) -> list[Integration]:
        """Return every registered integration with its actions.

        An integration whose provider fails is logged and omitted. Duplicate
        integration or action ids keep the first occurrence.
        """
        return [integration for _, integration in await self.catalog(language)]

    async def catalog(
        self, language: str | None = None
    ) -> list[tuple[RegisteredIntegration, Integration]]:
        """Return each registry entry paired with the integration built from it."""
        language = language or self.default_language
        integrations: list[tuple[RegisteredIntegration, Integration]] = []
        seen_integrations: set[str] = set()
        seen_actions: set[str] = set()

        for entry in self.registry.iter_registered():
            try:
                integration = self._build_integration(entry, language)
            except Exception:
                logger.exception("Failed to discover actions for %s", entry.folder)
                continue

            if integration.id in seen_integrations:
                logger.error(
                    "Duplicate integration id %s from folder %s. Skipping.",
                    integration.id,
                    entry.folder,
                )
                continue
            seen_integrations.add(integration.id)

            unique_actions: list[ActionInfo] = []
            for action in integration.actions:
                if action.id in seen_actions:
                    logger.error("Duplicate action id %s. Skipping.", action.id)
                    continue
                seen_actions.add(action.id)
                unique_actions.append(action)
            integration.actions = unique_actions

            integrations.append((entry, integration))

        return integrations

    async def discover_actions(self, language: str | None = None) -> list[ActionInfo]:
        """Return the flattened action catalog."""
        integrations = await self.discover_integrations(language)
        return [action for integration in integrations for action in integration.actions]

    async def discover_action_by_id(
        self, action_id: str, language: str | None = None
    ) -> ActionInfo | None:
        for action in await self.discover_actions(language):
            if action.id == action_id:
                return action
        return None

    async def get_integration_by_id(
        self, integration_id: str, language: str | None = None
    ) -> Integration | None:
        """Look up an integration; ``integration_id`` is normalized first."""
        wanted = to_snake_case(integration_id)
        for integration in await self.discover_integrations(language):
            if integration.id == wanted:
                return integration
        return None

    async def get_integrations_lean(
        self,
        language: str | None = None,
        fields: Iterable[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Project integrations onto ``fields`` (camelCase wire names).

        Unknown field names are ignored. When ``actions`` is requested each
        action is trimmed to ``{id, title, description}``.
        """
        wanted = list(fields) if fields else list(LEAN_INTEGRATION_FIELDS)
        lean: list[dict[str, Any]] = []
        for integration in await self.discover_integrations(language):
            full = integration.model_dump(by_alias=True)
            item: dict[str, Any] = {}
            for name in wanted:
                if name == "actions":
                    item["actions"] = [_lean_action(a) for a in integration.actions]
                elif name in full:
                    item[name] = full[name]
            lean.append(item)
        return lean
