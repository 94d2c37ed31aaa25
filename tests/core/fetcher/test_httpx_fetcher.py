"""Tests for the httpx-backed page fetcher."""

import httpx
import pytest

from payroc.core.fetcher import FetchRequest, HttpxFetcher


def make_fetcher(handler, **kwargs) -> HttpxFetcher:
    client = httpx.AsyncClient(
        base_url="https://api.example.com/v1",
        transport=httpx.MockTransport(handler),
    )
    kwargs.setdefault("retry_base_delay", 0)
    return HttpxFetcher(client=client, **kwargs)


@pytest.mark.asyncio
async def test_success_returns_body_and_raw_response():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [{"id": "1"}]}, headers={"X-Trace": "t"})

    fetcher = make_fetcher(handler)
    result = await fetcher(
        FetchRequest(
            url="https://api.example.com/v1/items",
            headers={"Authorization": "Bearer abc"},
            query_parameters={"limit": 5, "after": None},
        )
    )

    assert result.ok is True
    assert result.body == {"data": [{"id": "1"}]}
    assert result.raw_response.status_code == 200
    assert result.raw_response.headers["x-trace"] == "t"
    assert seen[0].url.params["limit"] == "5"
    assert "after" not in seen[0].url.params
    assert seen[0].headers["authorization"] == "Bearer abc"


@pytest.mark.asyncio
async def test_relative_url_resolves_against_base_url():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={})

    fetcher = make_fetcher(handler)
    await fetcher(FetchRequest(url="/items?page=2"))

    assert seen == ["https://api.example.com/v1/items?page=2"]


@pytest.mark.asyncio
async def test_status_error_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"title": "Not found"})

    fetcher = make_fetcher(handler)
    result = await fetcher(FetchRequest(url="/items"))

    assert result.ok is False
    assert result.error.reason == "status-code"
    assert result.error.status_code == 404
    assert result.error.body == {"title": "Not found"}
    assert result.error.describe() == "HTTP 404"


@pytest.mark.asyncio
async def test_invalid_json_is_non_json_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    fetcher = make_fetcher(handler)
    result = await fetcher(FetchRequest(url="/items"))

    assert result.ok is False
    assert result.error.reason == "non-json"


@pytest.mark.asyncio
async def test_timeout_is_retried_then_reported():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("timed out", request=request)

    fetcher = make_fetcher(handler, max_retries=2)
    result = await fetcher(FetchRequest(url="/items"))

    assert result.ok is False
    assert result.error.reason == "timeout"
    assert calls == 3


@pytest.mark.asyncio
async def test_transient_status_is_retried():
    responses = [httpx.Response(503), httpx.Response(200, json={"data": []})]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    fetcher = make_fetcher(handler)
    result = await fetcher(FetchRequest(url="/items"))

    assert result.ok is True
    assert responses == []


@pytest.mark.asyncio
async def test_client_error_is_not_retried():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(400, json={})

    fetcher = make_fetcher(handler, max_retries=3)
    await fetcher(FetchRequest(url="/items"))

    assert calls == 1


@pytest.mark.asyncio
async def test_request_max_retries_overrides_default():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(500)

    fetcher = make_fetcher(handler, max_retries=5)
    result = await fetcher(FetchRequest(url="/items", max_retries=0))

    assert result.error.status_code == 500
    assert calls == 1


@pytest.mark.asyncio
async def test_connection_error_is_unknown_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = make_fetcher(handler, max_retries=0)
    result = await fetcher(FetchRequest(url="/items"))

    assert result.error.reason == "unknown"
    assert "connection refused" in result.error.describe()


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    fetcher = HttpxFetcher(client=client)

    await fetcher.close()

    assert client.is_closed is False
    await client.aclose()


def raising_handler(error_factory):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise error_factory(request)

    return handler, calls


@pytest.mark.asyncio
async def test_connection_error_is_retried():
    handler, calls = raising_handler(
        lambda request: httpx.ConnectError("connection refused", request=request)
    )

    fetcher = make_fetcher(handler, max_retries=2)
    result = await fetcher(FetchRequest(url="/items"))

    assert result.error.reason == "unknown"
    assert result.error.retryable is True
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_non_transient_transport_error_is_not_retried():
    handler, calls = raising_handler(
        lambda request: httpx.UnsupportedProtocol("no such scheme", request=request)
    )

    fetcher = make_fetcher(handler, max_retries=3)
    result = await fetcher(FetchRequest(url="/items"))

    assert result.error.reason == "unknown"
    assert result.error.retryable is False
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_read_error_on_non_idempotent_request_is_not_retried():
    handler, calls = raising_handler(
        lambda request: httpx.ReadError("connection reset", request=request)
    )

    fetcher = make_fetcher(handler, max_retries=3)
    result = await fetcher(FetchRequest(url="/items", method="POST", body={"a": 1}))

    assert result.error.reason == "unknown"
    assert len(calls) == 1
