"""Link-relation pagination."""

from .links import (
    NEXT_REL,
    PREVIOUS_REL,
    ParsedPage,
    ResponseParser,
    clone_request_with_new_uri,
    get_link_uri,
    parse_link_response,
)
from .pager import PageState, Pager, create_pager

__all__ = [
    "NEXT_REL",
    "PREVIOUS_REL",
    "PageState",
    "Pager",
    "ParsedPage",
    "ResponseParser",
    "clone_request_with_new_uri",
    "create_pager",
    "get_link_uri",
    "parse_link_response",
]
