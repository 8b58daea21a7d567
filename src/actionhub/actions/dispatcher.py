"""Dispatcher executing function-call envelopes against the action catalog.

The dispatcher never raises for a bad call: unknown functions, malformed
arguments, and exceptions escaping an action all come back as
``DispatchResult(error=...)``. It does not interpret what an action returns;
``StandardActionResult`` vs. raw value is the action's choice.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterable
from typing import Any

from actionhub.actions.events import (
    EventPublisher,
    NullEventPublisher,
    publish_safely,
    truncate_output,
)
from actionhub.actions.factory import DispatchTable, build_dispatch_table
from actionhub.actions.naming import sanitize_function_name
from actionhub.actions.types import ActionContext, CredentialStore, SessionResolver
from actionhub.errors import extract_error_details
from actionhub.integrations.discovery import DiscoveryService
from actionhub.schemas.action import (
    ActionExecutionEvent,
    ActionStatus,
    DispatchError,
    DispatchResult,
    FunctionCall,
)
from actionhub.schemas.integration import ActionInfo

logger = logging.getLogger(__name__)


class ArgumentsError(ValueError):
    """The envelope's ``arguments`` are not a JSON object."""


def not_implemented_message(function_name: str) -> str:
    return f"Function {function_name} not implemented in the factory"


def parse_arguments(function_name: str, raw: str) -> dict[str, Any]:
    """Decode the JSON ``arguments`` string; an empty string means no arguments.

    Raises:
        ArgumentsError: If the payload is malformed or not an object.
    """
    if not raw or not raw.strip():
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ArgumentsError(f"Invalid JSON arguments for {function_name}: {exc.msg}") from exc
    if not isinstance(args, dict):
        raise ArgumentsError(
            f"Arguments for {function_name} must be a JSON object, got {type(args).__name__}"
        )
    return args


class Dispatcher:
    """Routes function calls to allowed catalog actions.

    Args:
        discovery: Catalog source used to build the per-call factory.
        session_resolver: Resolves ``(session_id, company_id)`` into a context.
        credentials: Credential store injected into contexts lacking one.
        publisher: Lifecycle event transport; events are skipped when absent.
    """

    def __init__(
        self,
        discovery: DiscoveryService,
        session_resolver: SessionResolver | None = None,
        credentials: CredentialStore | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        self.discovery = discovery
        self.session_resolver = session_resolver
        self.credentials = credentials
        self.publisher = publisher or NullEventPublisher()

    async def _resolve_context(self, session_id: str, company_id: str) -> ActionContext:
        if self.session_resolver is None:
            return ActionContext(session_id=session_id, company_id=company_id)
        return await self.session_resolver.resolve(session_id, company_id)

    async def execute_function_call(
        self,
        call: FunctionCall,
        session_id: str,
        company_id: str,
        allowed_action_ids: Iterable[str],
    ) -> DispatchResult:
        """Resolve the session into a context, then dispatch the call."""
        logger.info(
            "Executing %s for session %s, company %s",
            call.function.name,
            session_id,
            company_id,
        )
        try:
            context = await self._resolve_context(session_id, company_id)
        except Exception as exc:
            logger.exception("Failed to resolve session %s", session_id)
            return DispatchResult(error=DispatchError(**extract_error_details(exc)))
        return await self.execute_function_call_with_context(call, context, allowed_action_ids)

    async def execute_function_call_with_context(
        self,
        call: FunctionCall,
        context: ActionContext,
        allowed_action_ids: Iterable[str],
    ) -> DispatchResult:
        """Dispatch a call with a pre-built context (stateless callers).

        Args:
            call: ``{function: {name, arguments}}`` envelope.
            context: Identity passed to action creators.
            allowed_action_ids: Fully-qualified ids the caller may invoke.

        Returns:
            ``DispatchResult(result=...)`` with the action's return value, or
            ``DispatchResult(error=...)``.
        """
        context = context.with_credentials(self.credentials)
        allowed_ids = list(allowed_action_ids)
        allowed_names = {sanitize_function_name(action_id) for action_id in allowed_ids}

        function_name = call.function.name
        name = sanitize_function_name(function_name)

        try:
            catalog = await self.discovery.catalog(context.language) if allowed_ids else []
            table = build_dispatch_table(catalog, context, allowed_ids)
        except Exception:
            logger.exception("Critical error creating function factory")
            table = DispatchTable()

        definition = table.functions.get(name) if name in allowed_names else None
        if definition is None:
            logger.warning(
                "Function %s not allowed or not registered (allowed: %s)",
                function_name,
                sorted(allowed_names),
            )
            return DispatchResult(
                error=DispatchError(message=not_implemented_message(function_name), name="NotImplemented")
            )

        try:
            args = parse_arguments(function_name, call.function.arguments)
        except ArgumentsError as exc:
            logger.warning("%s", exc)
            return DispatchResult(error=DispatchError(message=str(exc), name="ArgumentsError"))

        action_info = self._event_action(table.actions.get(name), context)
        event_id = str(uuid.uuid4())
        await self._publish(event_id, "started", action_info, function_name, args, context)

        try:
            result = await definition.function(args)
        except Exception as exc:
            logger.exception("Error executing function %s", function_name)
            error = DispatchError(**extract_error_details(exc))
            await self._publish(
                event_id, "failed", action_info, function_name, args, context, error=error
            )
            return DispatchResult(error=error)

        await self._publish(
            event_id, "completed", action_info, function_name, args, context, output=result
        )
        return DispatchResult(result=result)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _event_action(
        self, action: ActionInfo | None, context: ActionContext
    ) -> ActionInfo | None:
        if isinstance(self.publisher, NullEventPublisher) or not context.session_id:
            return None
        return action

    async def _publish(
        self,
        event_id: str,
        status: ActionStatus,
        action_info: ActionInfo | None,
        function_name: str,
        args: dict[str, Any],
        context: ActionContext,
        output: Any = None,
        error: DispatchError | None = None,
    ) -> None:
        if action_info is None:
            return
        event = ActionExecutionEvent(
            id=event_id,
            status=status,
            action_id=action_info.id,
            original_action_id=function_name,
            service_name=action_info.service_name,
            action_title=action_info.action_title,
            action_description=action_info.description,
            icon=action_info.icon,
            args=args,
            language=context.language,
            output=truncate_output(output),
            error=error,
        )
        await publish_safely(self.publisher, context.session_id, event)
