"""Pydantic v2 schemas for integration descriptors and the discovery catalog.

``IntegrationConfig`` mirrors the ``integration.config.json`` file that lives
in every integration folder. ``Integration`` and ``ActionInfo`` are the
resolved, localized views produced by discovery. All models serialize with
camelCase aliases and accept either spelling on input.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SupportedLanguage = Literal["en", "he"]
SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "he")

DEFAULT_ICON = "help-circle"


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequiredApiKey(CamelModel):
    """A credential an integration needs before its actions can run."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1)
    label: str
    type: Literal["secret", "text"] = "secret"
    placeholder: str | None = None
    description: str | None = None
    help_url: str | None = None


class IntegrationConfig(CamelModel):
    """Declarative descriptor loaded from ``integration.config.json``.

    Immutable after load. ``action_creator`` names the registered creator
    function that builds this integration's actions.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    display_name: str | None = None
    description: str | None = None
    icon: str | None = None
    category: str | None = None
    action_creator: str = Field(..., min_length=1)
    actions_file: str | None = None
    required_api_keys: list[RequiredApiKey] = Field(default_factory=list)


class ActionInfo(CamelModel):
    """One callable action in the catalog, identified by ``{integration}.{action}``."""

    id: str
    service_name: str
    action_title: str
    description: str
    icon: str = DEFAULT_ICON
    service: str
    parameters: dict[str, Any] | None = None


class Integration(CamelModel):
    """Resolved integration with its actions, localized for one language."""

    id: str
    name: str
    display_name: str | None = None
    description: str = ""
    icon: str = DEFAULT_ICON
    category: str | None = None
    actions: list[ActionInfo] = Field(default_factory=list)
    required_api_keys: list[RequiredApiKey] = Field(default_factory=list)


class IntegrationTranslations(CamelModel):
    """Contents of ``translations/{language}.json``.

    Top-level ``serviceName``/``serviceDescription`` override the integration
    strings; any other key is an action key mapping to ``actionTitle`` and
    ``description`` overrides.
    """

    model_config = ConfigDict(extra="allow")

    service_name: str | None = None
    service_description: str | None = None

    def for_action(self, action_key: str) -> dict[str, str]:
        """Return the override dict for one action, empty when absent."""
        value = (self.model_extra or {}).get(action_key)
        return value if isinstance(value, dict) else {}


LEAN_INTEGRATION_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "displayName",
    "description",
    "icon",
    "actions",
)
