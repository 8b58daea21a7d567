import json
from unittest.mock import AsyncMock

import pytest

from actionhub.actions.dispatcher import ArgumentsError, Dispatcher, parse_arguments
from actionhub.actions.events import EventPublisher
from actionhub.actions.types import ActionContext
from actionhub.schemas.action import FunctionCall

ALLOWED = ["send_grid.send_email", "send_grid.explode", "google_maps.geocode"]


class RecordingPublisher(EventPublisher):
    def __init__(self):
        self.events = []

    async def publish(self, session_id, event):
        self.events.append((session_id, event))


class FailingPublisher(EventPublisher):
    async def publish(self, session_id, event):
        raise ConnectionError("redis down")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("raw", ["", "   "])
def test_empty_arguments_mean_no_arguments(raw):
    assert parse_arguments("fn", raw) == {}


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"text"'])
def test_bad_arguments_raise(raw):
    with pytest.raises(ArgumentsError):
        parse_arguments("fn", raw)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


async def test_dispatches_allowed_call(discovery, recorder):
    dispatcher = Dispatcher(discovery)
    call = FunctionCall.build("send_grid.send_email", json.dumps({"to": "x@y.com"}))

    outcome = await dispatcher.execute_function_call(call, "s1", "c1", ALLOWED)

    assert outcome.ok
    assert outcome.result == {"sent_to": "x@y.com", "company_id": "c1"}
    assert recorder.calls == [("send_email", {"to": "x@y.com"})]
    assert recorder.contexts[-1].session_id == "s1"


async def test_sanitized_function_name_is_accepted(discovery):
    dispatcher = Dispatcher(discovery)
    call = FunctionCall.build("send_grid_send_email", '{"to": "x@y.com"}')

    outcome = await dispatcher.execute_function_call(call, "s1", "c1", ALLOWED)

    assert outcome.ok


async def test_unknown_function_is_not_implemented(discovery):
    dispatcher = Dispatcher(discovery)
    call = FunctionCall.build("ghost.doesNotExist", "{}")

    outcome = await dispatcher.execute_function_call(call, "s1", "c1", ALLOWED)

    assert outcome.result is None
    assert outcome.error.name == "NotImplemented"
    assert outcome.error.message == "Function ghost.doesNotExist not implemented in the factory"


async def test_function_outside_allow_list_is_not_implemented(discovery, recorder):
    dispatcher = Dispatcher(discovery)
    call = FunctionCall.build("send_grid.send_email", '{"to": "x@y.com"}')

    outcome = await dispatcher.execute_function_call(call, "s1", "c1", ["google_maps.geocode"])

    assert outcome.error.name == "NotImplemented"
    assert recorder.calls == []


async def test_empty_arguments_string(discovery, recorder):
    dispatcher = Dispatcher(discovery)
    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", ""), "s1", "c1", ALLOWED
    )

    assert outcome.ok
    assert recorder.calls == [("send_email", {})]


async def test_malformed_arguments_are_an_error(discovery, recorder):
    dispatcher = Dispatcher(discovery)
    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", "{oops"), "s1", "c1", ALLOWED
    )

    assert outcome.error.name == "ArgumentsError"
    assert recorder.calls == []


async def test_action_exception_becomes_error(discovery):
    dispatcher = Dispatcher(discovery)
    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.explode"), "s1", "c1", ALLOWED
    )

    assert outcome.error.message == "boom"
    assert outcome.error.name == "RuntimeError"


async def test_session_resolver_supplies_context(discovery, recorder):
    resolver = AsyncMock()
    resolver.resolve.return_value = ActionContext(
        session_id="current", company_id="c1", language="he", user_id="u1"
    )
    credentials = AsyncMock()
    dispatcher = Dispatcher(discovery, session_resolver=resolver, credentials=credentials)

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", '{"to": "x@y.com"}'), "old", "c1", ALLOWED
    )

    assert outcome.ok
    resolver.resolve.assert_awaited_once_with("old", "c1")
    context = recorder.contexts[-1]
    assert context.session_id == "current"
    assert context.language == "he"
    assert context.credentials is credentials


async def test_session_resolution_failure_is_an_error(discovery, recorder):
    resolver = AsyncMock()
    resolver.resolve.side_effect = RuntimeError("database unavailable")
    dispatcher = Dispatcher(discovery, session_resolver=resolver)

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", "{}"), "s1", "c1", ALLOWED
    )

    assert outcome.error.message == "database unavailable"
    assert recorder.calls == []


async def test_stateless_context(discovery, recorder):
    dispatcher = Dispatcher(discovery)
    context = ActionContext(company_id="c9", is_stateless=True)

    outcome = await dispatcher.execute_function_call_with_context(
        FunctionCall.build("google_maps.geocode"), context, ALLOWED
    )

    assert outcome.result == {"lat": 32.08, "lng": 34.78}


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


async def test_publishes_started_and_completed(discovery):
    publisher = RecordingPublisher()
    dispatcher = Dispatcher(discovery, publisher=publisher)

    await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", '{"to": "x@y.com"}'), "s1", "c1", ALLOWED
    )

    statuses = [event.status for _, event in publisher.events]
    assert statuses == ["started", "completed"]
    session_id, completed = publisher.events[1]
    assert session_id == "s1"
    assert completed.action_id == "send_grid.send_email"
    assert completed.original_action_id == "send_grid.send_email"
    assert completed.service_name == "SendGrid"
    assert completed.args == {"to": "x@y.com"}
    assert completed.output == {"sent_to": "x@y.com", "company_id": "c1"}
    assert publisher.events[0][1].id == completed.id


async def test_publishes_failed_event(discovery):
    publisher = RecordingPublisher()
    dispatcher = Dispatcher(discovery, publisher=publisher)

    await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.explode"), "s1", "c1", ALLOWED
    )

    failed = publisher.events[-1][1]
    assert failed.status == "failed"
    assert failed.error.message == "boom"


async def test_no_events_without_session(discovery):
    publisher = RecordingPublisher()
    dispatcher = Dispatcher(discovery, publisher=publisher)

    await dispatcher.execute_function_call_with_context(
        FunctionCall.build("google_maps.geocode"), ActionContext(company_id="c1"), ALLOWED
    )

    assert publisher.events == []


async def test_publisher_failure_does_not_affect_result(discovery):
    dispatcher = Dispatcher(discovery, publisher=FailingPublisher())

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("google_maps.geocode"), "s1", "c1", ALLOWED
    )

    assert outcome.result == {"lat": 32.08, "lng": 34.78}


async def test_catalog_is_built_once_per_call_with_events(discovery, monkeypatch):
    calls = []
    original = discovery.catalog

    async def counting_catalog(language=None):
        calls.append(language)
        return await original(language)

    monkeypatch.setattr(discovery, "catalog", counting_catalog)
    publisher = RecordingPublisher()
    dispatcher = Dispatcher(discovery, publisher=publisher)

    await dispatcher.execute_function_call(
        FunctionCall.build("google_maps.geocode"), "s1", "c1", ALLOWED
    )

    assert len(calls) == 1
    assert [event.action_id for _, event in publisher.events] == [
        "google_maps.geocode",
        "google_maps.geocode",
    ]


async def test_large_outputs_are_truncated_in_events(discovery, recorder):
    publisher = RecordingPublisher()
    dispatcher = Dispatcher(discovery, publisher=publisher)
    long_address = "x" * 20000

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", json.dumps({"to": long_address})),
        "s1",
        "c1",
        ALLOWED,
    )

    assert outcome.result["sent_to"] == long_address
    completed = publisher.events[-1][1]
    assert completed.output["summary"] == "Large data response (truncated for display)"
    assert completed.output["preview"].endswith("... [truncated]")
