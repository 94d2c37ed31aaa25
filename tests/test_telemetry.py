"""Tests for error telemetry."""

from unittest.mock import AsyncMock

import pytest
from helpers import failed
from sentry_sdk.transport import Transport

from payroc import PayrocClient
from payroc.core.auth import StaticAuthProvider
from payroc.errors import AuthenticationError, ConfigurationError, PageFetchError
from payroc.settings import PayrocSettings
from payroc.telemetry import SDK_NAME, Telemetry, before_send, build_sentry_client


class RecordingTransport(Transport):
    """Keeps events in memory instead of sending them."""

    def __init__(self):
        super().__init__()
        self.events = []

    def capture_envelope(self, envelope):
        event = envelope.get_event()
        if event is not None:
            self.events.append(event)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def telemetry(transport):
    client = build_sentry_client(None, "1.0.0", transport=transport)
    return Telemetry(client, sdk_version="1.0.0")


@pytest.fixture
def settings():
    return PayrocSettings(_env_file=None, api_key=None, telemetry_dsn=None)


def raised(error: Exception) -> Exception:
    """Return ``error`` with a traceback attached."""
    try:
        raise error
    except Exception as e:
        return e


def test_before_send_redacts_credentials_and_pii():
    event = {
        "user": {"id": "u1", "email": "a@example.com", "ip_address": "10.0.0.1"},
        "exception": {"values": [{"type": "PayrocError", "value": "bad token=abc123"}]},
        "breadcrumbs": {
            "values": [
                {
                    "message": "call with api_key=secret",
                    "data": {"args": 1, "payload": {"card": "4111"}},
                }
            ]
        },
        "request": {
            "headers": {
                "Authorization": "Bearer abc",
                "X-API-Key": "key",
                "Accept": "application/json",
            },
            "cookies": {"session": "s"},
        },
    }

    result = before_send(event, {})

    assert result["user"] == {"id": "u1"}
    assert result["exception"]["values"][0]["value"] == "bad token=[REDACTED]"
    breadcrumb = result["breadcrumbs"]["values"][0]
    assert breadcrumb["message"] == "call with api_key=[REDACTED]"
    assert breadcrumb["data"] == {"args": 1}
    assert result["request"]["headers"] == {"Accept": "application/json"}
    assert result["request"]["cookies"] == {}


def test_before_send_labels_failing_method():
    event = {
        "exception": {"values": [{"value": "Failed to fetch page: HTTP 404"}]},
        "tags": {"client": "PayrocClient.payments", "method": "list", "http_status": "404"},
    }

    result = before_send(event, {})

    assert result["exception"]["values"][0]["value"] == (
        "[404] PayrocClient.payments.list Failed to fetch page: HTTP 404"
    )
    assert result["transaction"] == "PayrocClient.payments.list"


def test_capture_error_reports_tags_and_context(telemetry, transport):
    error = raised(
        PageFetchError(
            "Failed to fetch page: HTTP 401", reason="status-code", status_code=401
        )
    )

    event_id = telemetry.capture_error(
        error, {"client": "PayrocClient.payments", "method": "list"}
    )

    assert event_id is not None
    [event] = transport.events
    assert event["tags"]["client"] == "PayrocClient.payments"
    assert event["tags"]["method"] == "list"
    assert event["tags"]["http_status"] == "401"
    assert event["tags"]["sdk"] == SDK_NAME
    assert event["contexts"]["payroc_error"]["http_status_code"] == 401
    assert event["contexts"]["payroc_error"]["fetch_reason"] == "status-code"
    assert event["exception"]["values"][-1]["value"].startswith(
        "[401] PayrocClient.payments.list"
    )
    assert event["release"] == f"{SDK_NAME}@1.0.0"


def test_capture_error_scrubs_message(telemetry, transport):
    telemetry.capture_error(raised(AuthenticationError("Rejected Bearer abc123")))

    [event] = transport.events
    value = event["exception"]["values"][-1]["value"]
    assert "abc123" not in value
    assert "Bearer [REDACTED]" in value


def test_disabled_telemetry_sends_nothing(transport):
    client = build_sentry_client(None, "1.0.0", transport=transport)
    telemetry = Telemetry(client, enabled=False)

    telemetry.add_breadcrumb("PayrocClient.payments.list")

    assert telemetry.capture_error(raised(ValueError("boom"))) is None
    assert transport.events == []


def test_from_settings_requires_dsn_and_opt_in():
    disabled = Telemetry.from_settings(PayrocSettings(_env_file=None, telemetry_dsn=None))
    assert disabled.enabled is False

    settings = PayrocSettings(
        _env_file=None, telemetry_dsn="https://public@sentry.example.com/1"
    )
    assert Telemetry.from_settings(settings, enabled=False).enabled is False

    telemetry = Telemetry.from_settings(settings)
    assert telemetry.enabled is True
    telemetry.close()
    assert telemetry.enabled is False


@pytest.mark.asyncio
async def test_client_reports_failed_resource_call(settings, telemetry, transport):
    client = PayrocClient(
        settings=settings,
        auth_provider=StaticAuthProvider({"Authorization": "Bearer t"}),
        fetcher=AsyncMock(side_effect=[failed(500)]),
        telemetry=telemetry,
    )

    with pytest.raises(PageFetchError, match="Failed to fetch initial page"):
        await client.payments.list()

    [event] = transport.events
    assert event["tags"]["client"] == "PayrocClient.payments"
    assert event["tags"]["method"] == "list"
    assert event["tags"]["http_status"] == "500"
    assert event["transaction"] == "PayrocClient.payments.list"
    breadcrumbs = event["breadcrumbs"]["values"]
    assert [crumb["message"] for crumb in breadcrumbs] == ["PayrocClient.payments.list"]
    assert breadcrumbs[0]["data"] == {"args": 0}


@pytest.mark.asyncio
async def test_client_telemetry_opt_out(settings, transport):
    client = PayrocClient(
        settings=settings,
        auth_provider=StaticAuthProvider({"Authorization": "Bearer t"}),
        fetcher=AsyncMock(side_effect=[failed(500)]),
        telemetry=Telemetry(
            build_sentry_client(None, "1.0.0", transport=transport), enabled=False
        ),
    )

    with pytest.raises(PageFetchError):
        await client.payments.list()

    assert transport.events == []
    assert client.options.telemetry is False


def test_client_disabled_by_argument(settings):
    client = PayrocClient(settings=settings, fetcher=AsyncMock(), telemetry=False)

    assert client.telemetry.enabled is False
    assert client.options.telemetry is False


def test_client_reports_constructor_errors(telemetry, transport):
    settings = PayrocSettings(_env_file=None, environment="staging")

    with pytest.raises(ConfigurationError):
        PayrocClient(settings=settings, fetcher=AsyncMock(), telemetry=telemetry)

    [event] = transport.events
    assert event["tags"]["client"] == "PayrocClient"
    assert event["tags"]["phase"] == "constructor"
