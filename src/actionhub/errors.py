"""Error hierarchy raised by integration actions.

Action bodies raise these; ``execute_action`` funnels them into a
``StandardActionResult`` and the HTTP layer maps ``status_code`` onto the
response.
"""

from __future__ import annotations

from typing import Any


class ActionError(Exception):
    """Base class for errors related to action execution."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ActionValidationError(ActionError):
    """Caller-supplied arguments failed a precondition.

    Raised before any service call is attempted. Always recoverable by
    retrying with corrected input.
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        field_errors: dict[str, str] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.field_errors = field_errors


class ActionServiceError(ActionError):
    """A downstream service reported failure, or a local consistency check failed."""

    def __init__(
        self,
        message: str,
        *,
        service_name: str | None = None,
        service_response: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.service_name = service_name
        self.service_response = service_response


class ActionExecutionError(ActionError):
    """Any other failure while running an action (network, programming error)."""

    def __init__(
        self,
        message: str,
        *,
        action_name: str | None = None,
        original_error: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.action_name = action_name
        self.original_error = original_error


def extract_error_details(error: BaseException) -> dict[str, Any]:
    """Serialize an exception into a JSON-safe dict for dispatch errors and events."""
    details: dict[str, Any] = {}
    if isinstance(error, ActionError):
        details["status_code"] = error.status_code
    if isinstance(error, ActionValidationError) and error.field_errors:
        details["field_errors"] = error.field_errors
    if isinstance(error, ActionServiceError) and error.service_name:
        details["service_name"] = error.service_name
    if isinstance(error, ActionExecutionError) and error.action_name:
        details["action_name"] = error.action_name

    return {
        "message": str(error) or error.__class__.__name__,
        "name": error.__class__.__name__,
        "details": details or None,
    }
