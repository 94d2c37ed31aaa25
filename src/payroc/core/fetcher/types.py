"""
Request descriptor and fetch result types shared by the transport and the pager.

The pager never builds HTTP messages itself: it hands a ``FetchRequest`` to a
page fetcher and gets back an ``APIResponse`` that is either a decoded body
with its raw response, or a ``FetchError`` describing why the round trip failed.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

FetchErrorReason = Literal["status-code", "non-json", "timeout", "unknown"]


class FetchRequest(BaseModel):
    """How to ask for one page.

    Unknown fields are kept as extras so that caller-specific settings
    survive cloning for follow-up requests.
    """

    model_config = ConfigDict(extra="allow")

    url: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    query_parameters: dict[str, Any] | None = None
    body: Any = None
    timeout_in_seconds: float | None = None
    max_retries: int | None = None


@dataclass
class RawResponse:
    """Transport-level response metadata."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str = ""
    reason_phrase: str = ""

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "RawResponse":
        """Build from an ``httpx.Response``."""
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            url=str(response.url),
            reason_phrase=response.reason_phrase,
        )


@dataclass
class FetchError:
    """Why a page fetch failed."""

    reason: FetchErrorReason
    status_code: int | None = None
    body: Any = None
    error_message: str | None = None
    # Set by the transport for network failures that are safe to retry
    retryable: bool = False

    def describe(self) -> str:
        """Short human-readable reason, e.g. ``HTTP 404`` or ``timeout``."""
        if self.reason == "status-code":
            return f"HTTP {self.status_code}"
        if self.error_message:
            return f"{self.reason} ({self.error_message})"
        return self.reason


@dataclass
class APIResponse:
    """Outcome of one page fetch."""

    ok: bool
    body: Any = None
    raw_response: RawResponse | None = None
    error: FetchError | None = None

    @classmethod
    def success(cls, body: Any, raw_response: RawResponse) -> "APIResponse":
        return cls(ok=True, body=body, raw_response=raw_response)

    @classmethod
    def failure(
        cls, error: FetchError, raw_response: RawResponse | None = None
    ) -> "APIResponse":
        return cls(ok=False, raw_response=raw_response, error=error)


PageFetcher = Callable[[FetchRequest], Awaitable[APIResponse]]
