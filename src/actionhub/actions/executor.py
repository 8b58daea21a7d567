"""Execution wrapper giving every action a uniform result/error contract.

Integration actions route their service calls through ``execute_action``
instead of hand-rolling try/except. The wrapper classifies the outcome into
one of four kinds (ok, validation, service, unexpected) and renders that into
a ``StandardActionResult``. It never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from actionhub.errors import ActionServiceError, ActionValidationError
from actionhub.schemas.action import UNEXPECTED_ERROR_MESSAGE, StandardActionResult

logger = logging.getLogger(__name__)

R = TypeVar("R")
S = TypeVar("S")


# ---------------------------------------------------------------------------
# Outcome kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Ok:
    data: Any
    message: str


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    description: str
    status_code: int = 400
    field_errors: dict[str, str] | None = None


@dataclass(frozen=True, slots=True)
class ServiceFailure:
    description: str
    status_code: int = 500


@dataclass(frozen=True, slots=True)
class Unexpected:
    status_code: int = 500


Outcome = Ok | ValidationFailure | ServiceFailure | Unexpected


def _field(value: Any, name: str) -> Any:
    """Read ``name`` from a dict-shaped or attribute-shaped service response."""
    if isinstance(value, dict):
        return value.get(name)
    return getattr(value, name, None)


def _failure_text(response: Any) -> str | None:
    for name in ("description", "error", "message"):
        text = _field(response, name)
        if text:
            return str(text)
    return None


def render_outcome(outcome: Outcome) -> StandardActionResult[Any]:
    """Render a classified outcome as the wire-level result."""
    if isinstance(outcome, Ok):
        return StandardActionResult(success=True, data=outcome.data, message=outcome.message)
    if isinstance(outcome, ValidationFailure):
        return StandardActionResult(
            success=False,
            message=outcome.description,
            description=outcome.description,
            error_type="validation",
            status_code=outcome.status_code,
            field_errors=outcome.field_errors,
        )
    if isinstance(outcome, ServiceFailure):
        return StandardActionResult(
            success=False,
            message=outcome.description,
            description=outcome.description,
            error_type="service",
            status_code=outcome.status_code,
        )
    return StandardActionResult(
        success=False,
        message=UNEXPECTED_ERROR_MESSAGE,
        description=UNEXPECTED_ERROR_MESSAGE,
        error_type="unexpected",
        status_code=outcome.status_code,
    )


async def _run(
    action_name: str,
    service_call: Callable[[], Awaitable[S]],
    service_name: str,
    data_extractor: Callable[[S], Any] | None,
    success_message: str | None,
) -> Outcome:
    try:
        response = await service_call()
    except ActionValidationError as exc:
        return ValidationFailure(
            description=exc.message,
            status_code=exc.status_code,
            field_errors=exc.field_errors,
        )
    except ActionServiceError as exc:
        return ServiceFailure(description=exc.message, status_code=exc.status_code)
    except Exception:
        logger.exception("Action %s (%s) raised unexpectedly", action_name, service_name)
        return Unexpected()

    if _field(response, "success") is False:
        description = _failure_text(response) or f"Service call for '{action_name}' failed."
        status_code = _field(response, "status_code") or 500
        return ServiceFailure(description=description, status_code=status_code)

    try:
        data = data_extractor(response) if data_extractor else _field(response, "data")
    except Exception:
        logger.exception("Data extraction failed for action %s (%s)", action_name, service_name)
        return Unexpected()

    message = (
        success_message
        or _field(response, "description")
        or f"{action_name} completed successfully."
    )
    return Ok(data=data, message=message)


async def execute_action(
    action_name: str,
    service_call: Callable[[], Awaitable[S]],
    *,
    service_name: str,
    data_extractor: Callable[[S], R] | None = None,
    success_message: str | None = None,
) -> StandardActionResult[R]:
    """Run an action's service call and normalize the outcome.

    Args:
        action_name: Action name used in messages and logs.
        service_call: Zero-argument coroutine function performing the work.
            Its result may report ``success: False`` with a ``description``
            or ``error`` to signal a downstream failure.
        service_name: Name of the downstream service, for logging.
        data_extractor: Shapes the service result into the returned ``data``.
            Defaults to reading the result's ``data`` field.
        success_message: Message attached to successful results.

    Returns:
        A ``StandardActionResult``. Validation errors keep their message and
        field errors, service errors keep their message, anything else is
        reported with a generic message and logged with its traceback.
    """
    outcome = await _run(action_name, service_call, service_name, data_extractor, success_message)
    if isinstance(outcome, Ok):
        logger.info("Action %s (%s) succeeded", action_name, service_name)
    else:
        logger.warning(
            "Action %s (%s) failed: %s",
            action_name,
            service_name,
            type(outcome).__name__,
        )
    return render_outcome(outcome)
