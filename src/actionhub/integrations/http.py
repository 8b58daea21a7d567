"""HTTP helper shared by integration actions.

Downstream HTTP failures are raised as ``ActionServiceError`` carrying the
upstream status and message, so ``execute_action`` can classify them.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from actionhub.config import get_settings
from actionhub.errors import ActionServiceError

logger = logging.getLogger(__name__)


def _upstream_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "error_message", "error", "errors"):
            if body.get(key):
                return str(body[key])
    return str(body)[:200]


async def request_json(
    method: str,
    url: str,
    *,
    service_name: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json_data: Any = None,
) -> Any:
    """Make an HTTP request and return the decoded JSON body.

    Returns ``None`` for empty responses (e.g. 204).

    Raises:
        ActionServiceError: On a non-2xx response. Client errors keep their
            4xx status; everything else is reported as 502.
    """
    timeout = get_settings().http_timeout
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.request(
            method=method,
            url=url,
            headers=headers,
            params=params,
            json=json_data,
        )

    if response.is_error:
        message = _upstream_message(response)
        logger.warning(
            "%s request failed: %s %s -> %s %s",
            service_name,
            method,
            url,
            response.status_code,
            message,
        )
        status_code = response.status_code if response.status_code < 500 else 502
        raise ActionServiceError(
            f"{service_name} request failed: {message}",
            service_name=service_name,
            service_response={"status_code": response.status_code},
            status_code=status_code,
        )

    if not response.content:
        return None
    return response.json()
