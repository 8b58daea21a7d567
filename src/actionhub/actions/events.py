"""Action lifecycle event publishing.

The dispatcher reports ``started``/``completed``/``failed`` for every call
that reaches an action. EventPublisher is the transport abstraction;
RedisEventPublisher publishes to Redis pub/sub so UIs subscribed to a session
can follow progress.

Publishing is best-effort: failures are logged and never affect the action.
Large outputs are replaced by a summary before they go on the wire.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import redis.asyncio
from pydantic_core import to_jsonable_python

from actionhub.schemas.action import ActionExecutionEvent

logger = logging.getLogger(__name__)

EVENT_OUTPUT_LIMIT = 8000
SAMPLE_SIZE = 2


def truncate_output(output: Any, max_size: int = EVENT_OUTPUT_LIMIT) -> Any:
    """Bound an action output for event payloads.

    Outputs whose JSON encoding fits in ``max_size`` characters pass through
    unchanged. Larger lists become a summary with the first items as a
    sample; anything else becomes a summary with a truncated JSON preview.
    """
    if output is None:
        return None
    encoded = json.dumps(to_jsonable_python(output, fallback=str), ensure_ascii=False)
    if len(encoded) <= max_size:
        return output
    if isinstance(output, (list, tuple)):
        return {
            "summary": f"Large dataset with {len(output)} items (truncated for display)",
            "sample": list(output[:SAMPLE_SIZE]),
            "totalCount": len(output),
        }
    return {
        "summary": "Large data response (truncated for display)",
        "preview": encoded[: max_size - 100] + "... [truncated]",
    }


def session_channel(session_id: str) -> str:
    """Pub/sub topic carrying action events for one session."""
    return f"session:{session_id}:actions"


class EventPublisher(ABC):
    """Base interface for action event delivery."""

    @abstractmethod
    async def publish(self, session_id: str, event: ActionExecutionEvent) -> None:
        """Deliver one event to subscribers of ``session_id``."""
        ...


class NullEventPublisher(EventPublisher):
    """Publisher used when events are disabled or no session is known."""

    async def publish(self, session_id: str, event: ActionExecutionEvent) -> None:
        return None


class RedisEventPublisher(EventPublisher):
    """Publishes events to Redis pub/sub.

    Args:
        redis: The app's async Redis connection. Publishing is a regular
            command, so sharing the connection is safe.
    """

    def __init__(self, redis: redis.asyncio.Redis) -> None:
        self._redis = redis

    async def publish(self, session_id: str, event: ActionExecutionEvent) -> None:
        await self._redis.publish(
            session_channel(session_id),
            event.model_dump_json(by_alias=True),
        )


async def publish_safely(
    publisher: EventPublisher,
    session_id: str | None,
    event: ActionExecutionEvent,
) -> None:
    """Publish an event, swallowing and logging transport errors."""
    if not session_id:
        return
    try:
        await publisher.publish(session_id, event)
    except Exception:
        logger.warning(
            "Failed to publish %s event for action %s (non-critical)",
            event.status,
            event.action_id,
            exc_info=True,
        )
