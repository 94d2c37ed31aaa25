"""
Link-relation parsing for paginated list responses.

A list response looks like ``{"data": [...], "links": [{"rel": "next",
"href": "..."}]}``. Both fields are optional; a missing or malformed field
means "no items" or "no such page", never an error.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from payroc.core.fetcher import FetchRequest, RawResponse

NEXT_REL = "next"
PREVIOUS_REL = "previous"


@dataclass
class ParsedPage:
    """What a response parser extracts from one page."""

    items: list[Any] = field(default_factory=list)
    has_next_page: bool = False
    has_previous_page: bool = False
    next_request: FetchRequest | None = None
    previous_request: FetchRequest | None = None


ResponseParser = Callable[
    [FetchRequest, Any, RawResponse], "ParsedPage | Awaitable[ParsedPage]"
]


def _get_field(obj: Any, name: str) -> Any:
    # Generated response models expose fields as attributes, raw JSON as keys
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def get_link_uri(body: Any, rel: str) -> str | None:
    """
    Find the href of the first link with relation ``rel``.

    Args:
        body: Decoded response body
        rel: Relation name, e.g. "next"

    Returns:
        The href, or None when links are missing, the relation is absent,
        or its href is not a non-empty string
    """
    links = _get_field(body, "links")
    if not isinstance(links, (list, tuple)):
        return None

    for link in links:
        if _get_field(link, "rel") != rel:
            continue
        href = _get_field(link, "href")
        if isinstance(href, str) and href:
            return href

    return None


def clone_request_with_new_uri(request: FetchRequest, uri: str) -> FetchRequest:
    """
    Derive a follow-up request pointing at ``uri``.

    The href already carries the full query string, so structured query
    parameters are dropped. All other fields are copied unchanged.
    """
    return request.model_copy(
        update={"url": uri, "query_parameters": None},
        deep=True,
    )


def parse_link_response(
    request: FetchRequest, body: Any, raw_response: RawResponse
) -> ParsedPage:
    """Default parser: items from ``data``, navigation from ``links``."""
    items = _get_field(body, "data")
    if isinstance(items, tuple):
        items = list(items)
    elif not isinstance(items, list):
        items = []

    next_uri = get_link_uri(body, NEXT_REL)
    previous_uri = get_link_uri(body, PREVIOUS_REL)

    return ParsedPage(
        items=items,
        has_next_page=next_uri is not None,
        has_previous_page=previous_uri is not None,
        next_request=clone_request_with_new_uri(request, next_uri) if next_uri else None,
        previous_request=(
            clone_request_with_new_uri(request, previous_uri) if previous_uri else None
        ),
    )
