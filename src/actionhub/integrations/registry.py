"""Integration registry.

Scans the integrations root for folders carrying an
``integration.config.json`` descriptor and builds, in one pass, the
credential key -> integration name index and the integration name -> config
map. Action creators are registered explicitly by reference; an integration
counts as registered only when it has a valid descriptor, an existing actions
module, and a provider whose creator matches the descriptor's
``actionCreator``.

The registry is owned by the application lifespan and injected into
discovery and dispatch. Scans are cached until ``clear_cache()``.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from actionhub.actions.types import ActionCreator, ActionProvider
from actionhub.schemas.integration import IntegrationConfig, IntegrationTranslations

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "integration.config.json"
DEFAULT_ACTIONS_FILE = "actions.py"


def load_translations(integration_path: Path, language: str) -> IntegrationTranslations:
    """Load ``translations/{language}.json``; empty translations when missing or broken."""
    translations_path = integration_path / "translations" / f"{language}.json"
    if not translations_path.is_file():
        return IntegrationTranslations()
    try:
        raw = json.loads(translations_path.read_text(encoding="utf-8"))
        return IntegrationTranslations.model_validate(raw)
    except (OSError, ValueError, ValidationError):
        logger.exception("Failed to load translations from %s", translations_path)
        return IntegrationTranslations()


@dataclass(frozen=True, slots=True)
class RegisteredIntegration:
    """A folder that passed every registration check."""

    folder: str
    path: Path
    config: IntegrationConfig
    provider: ActionProvider


@dataclass(frozen=True, slots=True)
class _Snapshot:
    folders: dict[str, IntegrationConfig]
    configs: dict[str, IntegrationConfig]
    api_keys: dict[str, str]
    translations: dict[tuple[str, str], IntegrationTranslations] = field(default_factory=dict)


class IntegrationRegistry:
    """Filesystem-backed registry of integration descriptors and providers.

    Args:
        root: Directory whose subfolders are integrations.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self._providers: dict[str, ActionProvider] = {}
        self._snapshot: _Snapshot | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def register_provider(self, folder: str, creator: ActionCreator) -> ActionProvider:
        """Register the action creator for an integration folder.

        Re-registering a folder replaces the previous provider.
        """
        provider = ActionProvider(folder, creator)
        if folder in self._providers:
            logger.warning("Replacing action provider for integration folder %s", folder)
        self._providers[folder] = provider
        return provider

    def get_provider(self, folder: str) -> ActionProvider | None:
        return self._providers.get(folder)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _integration_folders(self) -> list[Path]:
        try:
            entries = sorted(self.root.iterdir())
        except OSError:
            logger.exception("Failed to read integrations directory %s", self.root)
            return []
        return [
            entry
            for entry in entries
            if entry.is_dir()
            and not entry.name.startswith((".", "_"))
            and (entry / CONFIG_FILENAME).is_file()
        ]

    @staticmethod
    def load_config(config_path: Path) -> IntegrationConfig | None:
        """Parse one descriptor, returning ``None`` (and logging) on any failure."""
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
            return IntegrationConfig.model_validate(raw)
        except (OSError, ValueError, ValidationError):
            logger.exception("Failed to load integration config %s", config_path)
            return None

    def _scan(self) -> _Snapshot:
        folders: dict[str, IntegrationConfig] = {}
        configs: dict[str, IntegrationConfig] = {}
        api_keys: dict[str, str] = {}

        paths = self._integration_folders()
        logger.info("Scanning %d integrations under %s", len(paths), self.root)

        for path in paths:
            config = self.load_config(path / CONFIG_FILENAME)
            if config is None:
                continue

            folders[path.name] = config
            configs[config.name] = config

            for api_key in config.required_api_keys:
                owner = api_keys.get(api_key.key)
                if owner is not None and owner != config.name:
                    # Later folder wins; shared credentials vs. misconfiguration is undecided.
                    logger.warning(
                        "Credential key %s declared by both %s and %s; using %s",
                        api_key.key,
                        owner,
                        config.name,
                        config.name,
                    )
                api_keys[api_key.key] = config.name

        logger.info(
            "Built mapping: %d API keys across %d integrations",
            len(api_keys),
            len(configs),
        )
        return _Snapshot(folders=folders, configs=configs, api_keys=api_keys)

    def _get_snapshot(self) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._scan()
            return self._snapshot

    def clear_cache(self) -> None:
        """Drop cached scans; the next access rescans the filesystem."""
        with self._lock:
            self._snapshot = None
        logger.info("Integration registry cache cleared")

    # ------------------------------------------------------------------
    # Credential index
    # ------------------------------------------------------------------

    def build_api_key_mapping(self) -> dict[str, str]:
        """Return ``{credential key: integration name}`` (a copy)."""
        return dict(self._get_snapshot().api_keys)

    def get_integration_id_for_api_key(self, key_name: str) -> str | None:
        return self._get_snapshot().api_keys.get(key_name)

    def is_registered_api_key(self, key_name: str) -> bool:
        return key_name in self._get_snapshot().api_keys

    def get_all_registered_api_keys(self) -> list[str]:
        return list(self._get_snapshot().api_keys)

    # ------------------------------------------------------------------
    # Configs
    # ------------------------------------------------------------------

    def get_all_integration_configs(self) -> dict[str, IntegrationConfig]:
        """Return ``{integration name: config}`` (a copy)."""
        return dict(self._get_snapshot().configs)

    def get_integration_config(self, integration_name: str) -> IntegrationConfig | None:
        return self._get_snapshot().configs.get(integration_name)

    def get_translations(self, folder: str, language: str) -> IntegrationTranslations:
        """Return an integration's translations, read once per cache generation."""
        cache = self._get_snapshot().translations
        cache_key = (folder, language)
        translations = cache.get(cache_key)
        if translations is None:
            translations = load_translations(self.root / folder, language)
            cache[cache_key] = translations
        return translations

    def iter_registered(self) -> list[RegisteredIntegration]:
        """Return every integration that is fully registered, in folder order.

        A folder is skipped (with a log line) when its actions module is
        missing, no provider is registered for it, or the provider's creator
        does not match the descriptor's ``actionCreator``.
        """
        registered: list[RegisteredIntegration] = []
        for folder, config in self._get_snapshot().folders.items():
            path = self.root / folder
            actions_file = path / (config.actions_file or DEFAULT_ACTIONS_FILE)
            if not actions_file.is_file():
                logger.info("Action file not found for %s. Skipping.", folder)
                continue

            provider = self._providers.get(folder)
            if provider is None or provider.name != config.action_creator:
                logger.warning(
                    "No valid action creator %s registered for %s. Skipping.",
                    config.action_creator,
                    folder,
                )
                continue

            registered.append(
                RegisteredIntegration(folder=folder, path=path, config=config, provider=provider)
            )
        return registered
