"""Pydantic v2 schemas for action results, dispatch envelopes, and events."""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from actionhub.schemas.integration import CamelModel

R = TypeVar("R")

ErrorType = Literal["validation", "service", "unexpected"]

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class StandardActionResult(CamelModel, Generic[R]):
    """Uniform outcome of an action.

    ``success=False`` implies ``data`` is absent and ``description`` explains
    the failure. ``error_type`` and ``status_code`` classify the failure for
    HTTP and agent callers.
    """

    success: bool
    data: R | None = None
    message: str | None = None
    description: str | None = None
    error_type: ErrorType | None = None
    status_code: int | None = None
    field_errors: dict[str, str] | None = None


# ---------------------------------------------------------------------------
# Dispatch envelope
# ---------------------------------------------------------------------------


class FunctionCallBody(BaseModel):
    """The ``function`` object of a tool call: a name and JSON-encoded arguments."""

    name: str = Field(..., min_length=1)
    arguments: str = "{}"


class FunctionCall(BaseModel):
    """Wire-level dispatch request ``{function: {name, arguments}}``."""

    function: FunctionCallBody

    @classmethod
    def build(cls, name: str, arguments: str = "{}") -> FunctionCall:
        return cls(function=FunctionCallBody(name=name, arguments=arguments))


class DispatchError(BaseModel):
    """Error half of a dispatch result."""

    message: str
    name: str | None = None
    details: dict[str, Any] | None = None


class DispatchResult(BaseModel):
    """``{result}`` on success or ``{error}`` on failure, never both."""

    result: Any = None
    error: DispatchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Lifecycle events
# ---------------------------------------------------------------------------


ActionStatus = Literal["started", "completed", "failed"]


class ActionExecutionEvent(CamelModel):
    """Lifecycle event published to a session's action channel."""

    id: str
    status: ActionStatus
    action_id: str
    original_action_id: str
    service_name: str
    action_title: str
    action_description: str
    icon: str = ""
    args: dict[str, Any] = Field(default_factory=dict)
    language: str | None = None
    output: Any = None
    error: DispatchError | None = None
