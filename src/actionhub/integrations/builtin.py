"""Registration table for the integrations shipped with actionhub.

Adding an integration means adding its folder (descriptor + ``actions.py``)
and one entry here; the discovery and dispatch core is unchanged.
"""

from __future__ import annotations

from actionhub.actions.types import ActionCreator
from actionhub.integrations.debug.actions import create_debug_actions
from actionhub.integrations.fly.actions import create_fly_actions
from actionhub.integrations.google_maps.actions import create_google_maps_actions
from actionhub.integrations.jsonbin.actions import create_jsonbin_actions
from actionhub.integrations.registry import IntegrationRegistry
from actionhub.integrations.sendgrid.actions import create_sendgrid_actions

BUILTIN_PROVIDERS: dict[str, ActionCreator] = {
    "debug": create_debug_actions,
    "fly": create_fly_actions,
    "google_maps": create_google_maps_actions,
    "jsonbin": create_jsonbin_actions,
    "sendgrid": create_sendgrid_actions,
}


def register_builtin_integrations(registry: IntegrationRegistry) -> None:
    """Register every built-in action creator on ``registry``."""
    for folder, creator in BUILTIN_PROVIDERS.items():
        registry.register_provider(folder, creator)
