"""Function factory: allow-list filtered dispatch table for one call."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from actionhub.actions.naming import sanitize_function_name
from actionhub.actions.types import ActionContext, FunctionFactory
from actionhub.integrations.discovery import DiscoveryService
from actionhub.integrations.registry import RegisteredIntegration
from actionhub.schemas.integration import ActionInfo, Integration

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchTable:
    """Allowed functions for one call, with the catalog record behind each."""

    functions: FunctionFactory = field(default_factory=dict)
    actions: dict[str, ActionInfo] = field(default_factory=dict)


def build_dispatch_table(
    catalog: Iterable[tuple[RegisteredIntegration, Integration]],
    context: ActionContext,
    allowed_action_ids: Iterable[str],
) -> DispatchTable:
    """Build the allow-listed table from an already discovered catalog.

    Each surviving action's provider is built with the real ``context``,
    once per integration. A provider failing here drops only its own
    actions.
    """
    table = DispatchTable()
    allowed = set(allowed_action_ids)
    if not allowed:
        return table

    for entry, integration in catalog:
        wanted = [action for action in integration.actions if action.id in allowed]
        if not wanted:
            continue

        try:
            built = entry.provider.build(context)
        except Exception:
            logger.exception(
                "Failed to initialize actions for %s; its actions are unavailable",
                integration.id,
            )
            continue

        prefix_length = len(integration.id) + 1
        for action in wanted:
            definition = built.get(action.id[prefix_length:])
            if definition is None:
                logger.warning("Action %s missing when built with a real context", action.id)
                continue
            name = sanitize_function_name(action.id)
            if name in table.functions:
                logger.error("Sanitized name %s collides for action %s", name, action.id)
                continue
            table.functions[name] = definition
            table.actions[name] = action

    return table


async def create_function_factory(
    discovery: DiscoveryService,
    context: ActionContext,
    allowed_action_ids: Iterable[str],
) -> FunctionFactory:
    """Build ``{sanitized action id: FunctionDefinition}`` for allowed actions.

    Only catalog actions whose id appears verbatim in ``allowed_action_ids``
    are included. Allowed ids that match nothing are simply absent from the
    result.

    Args:
        discovery: Catalog source.
        context: Identity for this call; actions close over it.
        allowed_action_ids: Fully-qualified ``integration.action`` ids.

    Returns:
        The dispatch table for this call.
    """
    allowed = list(allowed_action_ids)
    if not allowed:
        return {}
    catalog = await discovery.catalog(context.language)
    return build_dispatch_table(catalog, context, allowed).functions
