import json
from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError

from actionhub.actions.events import (
    RedisEventPublisher,
    publish_safely,
    session_channel,
    truncate_output,
)
from actionhub.schemas.action import ActionExecutionEvent, StandardActionResult


def _event(**overrides):
    fields = {
        "id": "evt-1",
        "status": "started",
        "action_id": "send_grid.send_email",
        "original_action_id": "send_grid.send_email",
        "service_name": "SendGrid",
        "action_title": "send_email",
        "action_description": "Send an email using SendGrid",
        "args": {"to": "x@y.com"},
    }
    fields.update(overrides)
    return ActionExecutionEvent(**fields)


def test_session_channel():
    assert session_channel("abc") == "session:abc:actions"


async def test_redis_publisher_sends_camel_case_json():
    redis = AsyncMock()

    await RedisEventPublisher(redis).publish("s1", _event())

    channel, payload = redis.publish.await_args.args
    assert channel == "session:s1:actions"
    body = json.loads(payload)
    assert body["actionId"] == "send_grid.send_email"
    assert body["originalActionId"] == "send_grid.send_email"
    assert body["status"] == "started"


async def test_publish_safely_swallows_transport_errors():
    redis = AsyncMock()
    redis.publish.side_effect = RedisConnectionError("down")

    await publish_safely(RedisEventPublisher(redis), "s1", _event(status="failed"))

    redis.publish.assert_awaited_once()


async def test_publish_safely_skips_without_session():
    redis = AsyncMock()

    await publish_safely(RedisEventPublisher(redis), None, _event())

    redis.publish.assert_not_awaited()


def test_small_output_passes_through():
    output = {"id": 1, "items": [1, 2, 3]}
    assert truncate_output(output) is output
    assert truncate_output(None) is None


def test_large_list_becomes_summary_with_sample():
    rows = [{"id": i, "name": "row" * 50} for i in range(200)]

    truncated = truncate_output(rows)

    assert truncated == {
        "summary": "Large dataset with 200 items (truncated for display)",
        "sample": rows[:2],
        "totalCount": 200,
    }


def test_large_object_becomes_preview():
    truncated = truncate_output({"blob": "z" * 500}, max_size=200)

    assert truncated["summary"] == "Large data response (truncated for display)"
    assert len(truncated["preview"]) == 100 + len("... [truncated]")


def test_model_outputs_are_measured_as_json():
    result = StandardActionResult(success=True, data=["a" * 100] * 100)

    truncated = truncate_output(result, max_size=1000)

    assert truncated["summary"] == "Large data response (truncated for display)"
    assert truncated["preview"].startswith('{"success": true')
