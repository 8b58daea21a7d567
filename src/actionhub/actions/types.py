"""Core types shared by action creators, the factory, and the dispatcher."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

ActionFunction = Callable[[dict[str, Any]], Awaitable[Any]]


class CredentialStore(Protocol):
    """Looks up per-company API keys for integrations."""

    async def get_api_key(self, company_id: str, key_name: str) -> str | None: ...


class SessionResolver(Protocol):
    """Turns a session/company pair into an ``ActionContext``."""

    async def resolve(self, session_id: str, company_id: str) -> ActionContext: ...


@dataclass(frozen=True, slots=True)
class ActionContext:
    """Identity and request-scoped input passed to every action creator.

    Built per dispatch call and never shared. Discovery builds actions with
    an empty context, so creators must not touch these fields until the
    inner function runs.
    """

    session_id: str | None = None
    company_id: str | None = None
    language: str | None = None
    is_stateless: bool = False
    user_id: str | None = None
    credentials: CredentialStore | None = field(default=None, compare=False, repr=False)

    def with_credentials(self, credentials: CredentialStore | None) -> ActionContext:
        if self.credentials is not None or credentials is None:
            return self
        return replace(self, credentials=credentials)

    async def get_api_key(self, key_name: str) -> str | None:
        """Resolve a credential for this context's company, ``None`` if unavailable."""
        if self.credentials is None or not self.company_id:
            return None
        return await self.credentials.get_api_key(self.company_id, key_name)


@dataclass(slots=True)
class FunctionDefinition:
    """The executable unit behind a catalog action."""

    description: str
    function: ActionFunction
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    strict: bool = False


FunctionFactory = dict[str, FunctionDefinition]
ActionCreator = Callable[[ActionContext], FunctionFactory]


class ActionProvider:
    """Binds an integration folder to the creator that builds its actions.

    Args:
        folder: Integration directory name holding ``integration.config.json``.
        creator: Pure function ``(context) -> {action_key: FunctionDefinition}``.
    """

    def __init__(self, folder: str, creator: ActionCreator) -> None:
        self.folder = folder
        self.creator = creator

    @property
    def name(self) -> str:
        """Creator name matched against the descriptor's ``actionCreator``."""
        return self.creator.__name__

    def describe(self) -> FunctionFactory:
        """Build the actions with an empty context for cataloguing."""
        return self.build(ActionContext())

    def build(self, context: ActionContext) -> FunctionFactory:
        actions = self.creator(context)
        return dict(actions or {})

    def __repr__(self) -> str:
        return f"ActionProvider(folder={self.folder!r}, creator={self.name!r})"
