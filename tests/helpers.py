"""Shared builders for fake page-fetch results."""

from payroc.core.fetcher import APIResponse, FetchError, RawResponse


def make_raw_response(status_code: int = 200) -> RawResponse:
    return RawResponse(
        status_code=status_code,
        headers={},
        url="https://api.example.com/items",
        reason_phrase="OK" if status_code == 200 else "Error",
    )


def ok(body) -> APIResponse:
    """Successful fetch result carrying ``body``."""
    return APIResponse.success(body, make_raw_response())


def failed(status_code: int = 500) -> APIResponse:
    """Status-code failure result."""
    return APIResponse.failure(
        FetchError(reason="status-code", status_code=status_code, body={}),
        make_raw_response(status_code),
    )


def page(items, next_href=None, previous_href=None) -> dict:
    """Build a list response body with optional navigation links."""
    links = []
    if next_href is not None:
        links.append({"rel": "next", "href": next_href})
    if previous_href is not None:
        links.append({"rel": "previous", "href": previous_href})
    return {"data": items, "links": links}
