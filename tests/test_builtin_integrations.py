import json
from unittest.mock import AsyncMock

import httpx
import pytest

from actionhub.actions.dispatcher import Dispatcher
from actionhub.actions.types import ActionContext
from actionhub.app import build_registry
from actionhub.config import Settings
from actionhub.errors import ActionServiceError
from actionhub.integrations import http
from actionhub.integrations.discovery import DiscoveryService
from actionhub.schemas.action import FunctionCall, StandardActionResult


class DictCredentials:
    def __init__(self, values):
        self.values = values

    async def get_api_key(self, company_id, key_name):
        return self.values.get((company_id, key_name))


@pytest.fixture
def builtin_discovery():
    return DiscoveryService(build_registry(Settings()))


@pytest.fixture
def credentials():
    return DictCredentials(
        {
            ("c1", "sendgrid_api_key"): "SG.test",
            ("c1", "sendgrid_from_email"): "noreply@example.com",
            ("c1", "google_maps_api_key"): "maps-key",
        }
    )


async def test_every_builtin_integration_is_registered(builtin_discovery):
    integrations = await builtin_discovery.discover_integrations()

    assert [i.id for i in integrations] == ["debug", "fly", "google_maps", "json_bin", "send_grid"]
    assert all(i.actions for i in integrations)


async def test_builtin_credential_index():
    registry = build_registry(Settings())

    assert registry.get_integration_id_for_api_key("sendgrid_from_email") == "SendGrid"
    assert registry.get_integration_id_for_api_key("fly_org_slug") == "Fly"
    assert registry.get_integration_id_for_api_key("jsonbin_api_key") == "JSONBin"


async def test_hebrew_catalog(builtin_discovery):
    action = await builtin_discovery.discover_action_by_id("send_grid.send_email", "he")
    assert action.action_title == "שליחת אימייל"


async def test_sendgrid_send_email(builtin_discovery, credentials, monkeypatch):
    post = AsyncMock(return_value=None)
    monkeypatch.setattr("actionhub.integrations.sendgrid.actions.request_json", post)
    dispatcher = Dispatcher(builtin_discovery, credentials=credentials)
    args = {"to": "a@b.com", "subject": "Hi", "text": "Hello", "html": "<p>Hello</p>"}

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", json.dumps(args)),
        "s1",
        "c1",
        ["send_grid.send_email"],
    )

    assert isinstance(outcome.result, StandardActionResult)
    assert outcome.result.success is True
    assert outcome.result.message == "Email sent successfully."
    sent = post.await_args
    assert sent.kwargs["headers"] == {"Authorization": "Bearer SG.test"}
    assert sent.kwargs["json_data"]["from"] == {"email": "noreply@example.com"}


async def test_sendgrid_rejects_invalid_email(builtin_discovery, credentials, monkeypatch):
    post = AsyncMock()
    monkeypatch.setattr("actionhub.integrations.sendgrid.actions.request_json", post)
    dispatcher = Dispatcher(builtin_discovery, credentials=credentials)
    args = {"to": "not-an-email", "subject": "Hi", "text": "Hello", "html": "<p>Hello</p>"}

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", json.dumps(args)),
        "s1",
        "c1",
        ["send_grid.send_email"],
    )

    result = outcome.result
    assert result.success is False
    assert result.error_type == "validation"
    assert result.field_errors == {"to": "invalid email"}
    post.assert_not_awaited()


async def test_sendgrid_without_credentials_reports_failure(builtin_discovery, monkeypatch):
    monkeypatch.setattr("actionhub.integrations.sendgrid.actions.request_json", AsyncMock())
    dispatcher = Dispatcher(builtin_discovery, credentials=DictCredentials({}))
    args = {"to": "a@b.com", "subject": "Hi", "text": "Hello", "html": "<p>Hello</p>"}

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("send_grid.send_email", json.dumps(args)),
        "s1",
        "c1",
        ["send_grid.send_email"],
    )

    assert outcome.result.success is False
    assert outcome.result.error_type == "service"
    assert "not configured" in outcome.result.description


async def test_google_maps_geocode(builtin_discovery, credentials, monkeypatch):
    get = AsyncMock(
        return_value={
            "status": "OK",
            "results": [
                {
                    "formatted_address": "Dizengoff St, Tel Aviv",
                    "place_id": "abc",
                    "geometry": {"location": {"lat": 32.08, "lng": 34.77}},
                }
            ],
        }
    )
    monkeypatch.setattr("actionhub.integrations.google_maps.actions.request_json", get)
    dispatcher = Dispatcher(builtin_discovery, credentials=credentials)

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("google_maps.geocode_address", '{"address": "Dizengoff"}'),
        "s1",
        "c1",
        ["google_maps.geocode_address"],
    )

    result = outcome.result
    assert result.success is True
    assert result.data[0]["place_id"] == "abc"
    assert get.await_args.kwargs["params"] == {"address": "Dizengoff", "key": "maps-key"}


async def test_google_maps_denied_status(builtin_discovery, credentials, monkeypatch):
    get = AsyncMock(return_value={"status": "REQUEST_DENIED", "error_message": "bad key"})
    monkeypatch.setattr("actionhub.integrations.google_maps.actions.request_json", get)
    dispatcher = Dispatcher(builtin_discovery, credentials=credentials)

    outcome = await dispatcher.execute_function_call(
        FunctionCall.build("google_maps.geocode_address", '{"address": "x"}'),
        "s1",
        "c1",
        ["google_maps.geocode_address"],
    )

    assert outcome.result.error_type == "service"
    assert outcome.result.description == "bad key"


async def test_debug_session_info(builtin_discovery, credentials):
    dispatcher = Dispatcher(builtin_discovery, credentials=credentials)
    context = ActionContext(session_id="s1", company_id="c1", language="he", user_id="u1")

    outcome = await dispatcher.execute_function_call_with_context(
        FunctionCall.build("debug.get_session_info"), context, ["debug.get_session_info"]
    )

    assert outcome.result.data == {
        "session_id": "s1",
        "company_id": "c1",
        "user_id": "u1",
        "language": "he",
        "is_stateless": False,
        "has_credentials": True,
    }


@pytest.mark.parametrize(
    "kind,error_type,status_code",
    [
        ("validation", "validation", 400),
        ("service", "service", 500),
        ("reported", "service", 500),
        ("unexpected", "unexpected", 500),
    ],
)
async def test_debug_simulated_failures(builtin_discovery, kind, error_type, status_code):
    dispatcher = Dispatcher(builtin_discovery)

    outcome = await dispatcher.execute_function_call_with_context(
        FunctionCall.build("debug.simulate_failure", json.dumps({"kind": kind})),
        ActionContext(company_id="c1"),
        ["debug.simulate_failure"],
    )

    assert outcome.ok
    assert outcome.result.success is False
    assert outcome.result.error_type == error_type
    assert outcome.result.status_code == status_code


# ---------------------------------------------------------------------------
# HTTP helper
# ---------------------------------------------------------------------------


def _mock_client(monkeypatch, handler):
    transport = httpx.MockTransport(handler)
    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        http.httpx, "AsyncClient", lambda **kwargs: real_client(transport=transport, **kwargs)
    )


async def test_request_json_decodes_body(monkeypatch):
    _mock_client(monkeypatch, lambda request: httpx.Response(200, json={"ok": True}))

    body = await http.request_json("GET", "https://api.test/x", service_name="test")

    assert body == {"ok": True}


async def test_request_json_empty_body(monkeypatch):
    _mock_client(monkeypatch, lambda request: httpx.Response(204))

    assert await http.request_json("DELETE", "https://api.test/x", service_name="test") is None


@pytest.mark.parametrize("upstream,expected", [(404, 404), (503, 502)])
async def test_request_json_errors(monkeypatch, upstream, expected):
    _mock_client(
        monkeypatch, lambda request: httpx.Response(upstream, json={"message": "nope"})
    )

    with pytest.raises(ActionServiceError) as excinfo:
        await http.request_json("GET", "https://api.test/x", service_name="test")

    assert excinfo.value.status_code == expected
    assert "nope" in excinfo.value.message
