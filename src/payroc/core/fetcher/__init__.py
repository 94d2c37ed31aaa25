"""Page fetching: request descriptors, results and the default httpx transport."""

from .httpx_fetcher import HttpxFetcher
from .retry import async_retry_with_backoff
from .types import (
    APIResponse,
    FetchError,
    FetchErrorReason,
    FetchRequest,
    PageFetcher,
    RawResponse,
)

__all__ = [
    "APIResponse",
    "FetchError",
    "FetchErrorReason",
    "FetchRequest",
    "HttpxFetcher",
    "PageFetcher",
    "RawResponse",
    "async_retry_with_backoff",
]
