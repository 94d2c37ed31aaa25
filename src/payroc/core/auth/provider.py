"""
Authorization header providers.

The pager asks its provider for fresh headers before every follow-up request,
so providers must be cheap to call repeatedly and safe to share between
pagers running concurrently.
"""

import asyncio
from dataclasses import dataclass, field
import logging
from time import monotonic
from typing import Protocol, runtime_checkable

import httpx

from payroc.errors import AuthenticationError, format_api_error

logger = logging.getLogger(__name__)

# Refresh the token this many seconds before the server says it expires
EXPIRY_BUFFER_SECONDS = 60

# Used when the identity service omits expires_in
DEFAULT_TOKEN_LIFETIME = 3600

REQUEST_TIMEOUT = 30.0


@dataclass
class AuthRequest:
    """Headers to attach to an outgoing request."""

    headers: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class AuthProvider(Protocol):
    """Supplies the current authorization headers."""

    async def get_auth_request(self) -> AuthRequest: ...


class StaticAuthProvider:
    """Returns the same headers on every call."""

    def __init__(self, headers: dict[str, str]):
        self._headers = dict(headers)

    async def get_auth_request(self) -> AuthRequest:
        return AuthRequest(headers=dict(self._headers))


class BearerAuthProvider:
    """
    Exchanges an API key for a short-lived bearer token.

    The token is cached and refreshed shortly before it expires. Concurrent
    callers wait on a single refresh instead of each hitting the identity
    service.
    """

    def __init__(
        self,
        api_key: str,
        identity_url: str,
        client: httpx.AsyncClient | None = None,
        expiry_buffer_seconds: float = EXPIRY_BUFFER_SECONDS,
    ):
        """
        Initialize the provider.

        Args:
            api_key: Payroc API key
            identity_url: Base URL of the identity service
            client: Optional HTTP client; the provider will not close it
            expiry_buffer_seconds: How early to refresh before expiry
        """
        if not api_key:
            raise AuthenticationError(
                "An API key is required",
                suggestion="Set PAYROC_API_KEY or pass api_key explicitly",
            )
        self.api_key = api_key
        self.identity_url = identity_url.rstrip("/")
        self.expiry_buffer_seconds = expiry_buffer_seconds
        self._client = client
        self._owns_client = client is None
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=REQUEST_TIMEOUT)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get_auth_request(self) -> AuthRequest:
        token = await self.get_token()
        return AuthRequest(headers={"Authorization": f"Bearer {token}"})

    async def get_token(self) -> str:
        """Return a valid access token, fetching a new one when needed."""
        async with self._lock:
            if self._token is None or monotonic() >= self._expires_at:
                await self._refresh()
            return self._token

    async def _refresh(self) -> None:
        client = await self._get_client()
        url = f"{self.identity_url}/authorize"

        try:
            response = await client.post(url, headers={"x-api-key": self.api_key})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthenticationError(
                "Failed to obtain access token",
                suggestion=format_api_error(e.response.status_code),
            ) from e
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Failed to reach identity service: {e}") from e
        except ValueError as e:
            raise AuthenticationError(
                f"Identity service returned an invalid response: {e}"
            ) from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError("Identity service response has no access_token")

        raw_expires_in = data.get("expires_in") or DEFAULT_TOKEN_LIFETIME
        try:
            expires_in = float(raw_expires_in)
        except (TypeError, ValueError) as e:
            raise AuthenticationError(
                f"Identity service returned an invalid expires_in: {raw_expires_in!r}"
            ) from e

        # Token and expiry change together or not at all
        self._token, self._expires_at = token, monotonic() + max(
            expires_in - self.expiry_buffer_seconds, 0.0
        )
        logger.debug(f"Obtained access token valid for {expires_in:g}s")
