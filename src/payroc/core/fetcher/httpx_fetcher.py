"""
Default page fetcher built on httpx.

Performs one HTTP round trip per ``FetchRequest`` and reports the outcome as
an ``APIResponse`` instead of raising, retrying transient failures with
exponential backoff.
"""

import logging

import httpx

from payroc.core.fetcher.retry import RETRYABLE_STATUS_CODES, async_retry_with_backoff
from payroc.core.fetcher.types import APIResponse, FetchError, FetchRequest, RawResponse

logger = logging.getLogger(__name__)

# Request timeout in seconds
DEFAULT_TIMEOUT = 60.0

DEFAULT_MAX_RETRIES = 2

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


def _is_transient(error: httpx.HTTPError, method: str) -> bool:
    # The request never reached the server
    if isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout)):
        return True
    if isinstance(
        error, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)
    ):
        return method.upper() in IDEMPOTENT_METHODS
    return False


def _is_retryable(response: APIResponse) -> bool:
    if response.ok or response.error is None:
        return False
    if response.error.reason in ("timeout", "unknown"):
        return response.error.retryable
    return (
        response.error.reason == "status-code"
        and response.error.status_code in RETRYABLE_STATUS_CODES
    )


class HttpxFetcher:
    """Page fetcher backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout_in_seconds: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            base_url: Base URL that relative request URLs resolve against
            timeout_in_seconds: Default per-request timeout
            max_retries: Default number of retries for transient failures
            retry_base_delay: First backoff delay in seconds
            client: Optional pre-built client; the fetcher will not close it
        """
        self.base_url = base_url
        self.timeout_in_seconds = timeout_in_seconds
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url or "",
                timeout=self.timeout_in_seconds,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def __call__(self, request: FetchRequest) -> APIResponse:
        max_retries = (
            request.max_retries if request.max_retries is not None else self.max_retries
        )
        return await async_retry_with_backoff(
            lambda: self._send_once(request),
            should_retry=_is_retryable,
            max_retries=max_retries,
            base_delay=self.retry_base_delay,
            description=f"{request.method} {request.url}",
        )

    async def _send_once(self, request: FetchRequest) -> APIResponse:
        client = await self._get_client()

        params = {
            key: value
            for key, value in (request.query_parameters or {}).items()
            if value is not None
        }
        timeout = (
            request.timeout_in_seconds
            if request.timeout_in_seconds is not None
            else self.timeout_in_seconds
        )

        try:
            response = await client.request(
                request.method,
                request.url,
                headers=request.headers,
                params=params or None,
                json=request.body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            logger.debug(f"Request timed out: {request.method} {request.url}")
            return APIResponse.failure(
                FetchError(
                    reason="timeout",
                    error_message=str(e) or None,
                    retryable=_is_transient(e, request.method),
                )
            )
        except httpx.HTTPError as e:
            logger.debug(f"Request failed: {request.method} {request.url}: {e}")
            return APIResponse.failure(
                FetchError(
                    reason="unknown",
                    error_message=str(e) or type(e).__name__,
                    retryable=_is_transient(e, request.method),
                )
            )

        raw_response = RawResponse.from_httpx(response)

        body = None
        if response.content:
            try:
                body = response.json()
            except ValueError as e:
                if response.is_success:
                    return APIResponse.failure(
                        FetchError(
                            reason="non-json",
                            status_code=response.status_code,
                            body=response.text,
                            error_message=str(e),
                        ),
                        raw_response,
                    )
                body = response.text

        if not response.is_success:
            return APIResponse.failure(
                FetchError(
                    reason="status-code",
                    status_code=response.status_code,
                    body=body,
                ),
                raw_response,
            )

        return APIResponse.success(body, raw_response)
