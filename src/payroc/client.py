"""
Payroc API client.

Wires settings, authentication and the default transport together and
exposes resource clients whose list operations return pagers.
"""

from dataclasses import replace
import logging
from typing import Any

from pydantic import ValidationError

from payroc.core.auth import AuthProvider, BearerAuthProvider
from payroc.core.fetcher import FetchRequest, HttpxFetcher, PageFetcher, RawResponse
from payroc.core.headers import merge_headers, merge_only_defined_headers
from payroc.core.options import ClientOptions
from payroc.core.pagination import Pager, ParsedPage, create_pager, parse_link_response
from payroc.environments import PayrocEnvironmentUrls
from payroc.models import ListPaymentsRequest, Payment
from payroc.settings import PayrocSettings
from payroc.telemetry import Telemetry, instrumented

logger = logging.getLogger(__name__)

CLIENT_NAME = "PayrocClient"


def parse_payment_list(
    request: FetchRequest, body: Any, raw_response: RawResponse
) -> ParsedPage:
    """Parse a payments page into ``Payment`` models.

    Links are read from the raw body, so malformed links are ignored like
    everywhere else. Items are validated one by one; an item that is not a
    payment is skipped with a warning, so every page yields ``Payment``s.
    """
    parsed = parse_link_response(request, body, raw_response)

    payments = []
    for item in parsed.items:
        try:
            payments.append(Payment.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed payment in {request.url}: {e}")
    return replace(parsed, items=payments)


class PaymentsClient:
    """Operations on the /payments resource."""

    telemetry_path = f"{CLIENT_NAME}.payments"

    def __init__(self, client: "PayrocClient"):
        self._client = client

    @property
    def telemetry(self) -> Telemetry:
        return self._client.telemetry

    @instrumented
    async def list(
        self, request: ListPaymentsRequest | None = None
    ) -> Pager[Payment, dict[str, Any]]:
        """
        List card payments, newest first.

        Args:
            request: Optional filters and page size

        Returns:
            A pager positioned on the first page

        Raises:
            PageFetchError: If the first page cannot be fetched
        """
        request = request or ListPaymentsRequest()
        initial_request = await self._client.build_request(
            "GET",
            "payments",
            query_parameters=request.to_query_parameters(),
        )
        return await create_pager(
            self._client.fetcher,
            initial_request,
            self._client.options,
            parser=parse_payment_list,
        )


class PayrocClient:
    """Entry point for the Payroc API."""

    def __init__(
        self,
        api_key: str | None = None,
        environment: PayrocEnvironmentUrls | None = None,
        auth_provider: AuthProvider | None = None,
        fetcher: PageFetcher | None = None,
        settings: PayrocSettings | None = None,
        timeout_in_seconds: float | None = None,
        max_retries: int | None = None,
        headers: dict[str, str] | None = None,
        telemetry: bool | Telemetry | None = None,
    ):
        """
        Initialize the client.

        Explicit arguments win over values loaded from PAYROC_* settings.

        Args:
            api_key: API key exchanged for bearer tokens
            environment: API and identity base URLs
            auth_provider: Custom auth provider (overrides api_key)
            fetcher: Custom page fetcher (defaults to HttpxFetcher)
            settings: Settings instance (loaded from the environment if omitted)
            timeout_in_seconds: Per-request timeout
            max_retries: Transport retries for transient failures
            headers: Static headers sent with every request
            telemetry: False to disable error reporting, or a ready
                ``Telemetry`` instance
        """
        settings = settings or PayrocSettings()
        if isinstance(telemetry, Telemetry):
            self.telemetry = telemetry
        else:
            self.telemetry = Telemetry.from_settings(settings, enabled=telemetry)

        try:
            options = ClientOptions.from_settings(settings)
            options.telemetry = self.telemetry.enabled

            if environment is not None:
                options.environment = environment
            if timeout_in_seconds is not None:
                options.timeout_in_seconds = timeout_in_seconds
            if max_retries is not None:
                options.max_retries = max_retries
            if headers:
                options.headers = {**options.headers, **headers}

            api_key = api_key or settings.api_key
            self._owns_auth_provider = auth_provider is None and bool(api_key)
            if self._owns_auth_provider:
                auth_provider = BearerAuthProvider(api_key, options.environment.identity)
        except Exception as e:
            self.telemetry.capture_error(e, {"client": CLIENT_NAME, "phase": "constructor"})
            raise

        options.auth_provider = auth_provider
        if auth_provider is None:
            logger.warning(
                "No API key or auth provider configured; requests are unauthenticated"
            )

        self.options = options
        self._owns_fetcher = fetcher is None
        self.fetcher: PageFetcher = fetcher or HttpxFetcher(
            base_url=options.environment.api,
            timeout_in_seconds=options.timeout_in_seconds,
            max_retries=options.max_retries,
        )
        self.payments = PaymentsClient(self)

    async def build_request(
        self,
        method: str,
        path: str,
        query_parameters: dict[str, Any] | None = None,
        body: Any = None,
    ) -> FetchRequest:
        """Build an authenticated request for ``path`` under the API base URL."""
        auth_headers: dict[str, str] = {}
        if self.options.auth_provider is not None:
            auth_request = await self.options.auth_provider.get_auth_request()
            auth_headers = merge_only_defined_headers(auth_request.headers)

        return FetchRequest(
            url=f"{self.options.environment.api.rstrip('/')}/{path.lstrip('/')}",
            method=method,
            headers=merge_headers(self.options.headers, auth_headers),
            query_parameters=query_parameters or None,
            body=body,
            timeout_in_seconds=self.options.timeout_in_seconds,
            max_retries=self.options.max_retries,
        )

    async def aclose(self) -> None:
        """Close the default transport and auth provider if owned."""
        if self._owns_fetcher and isinstance(self.fetcher, HttpxFetcher):
            await self.fetcher.close()
        if self._owns_auth_provider and isinstance(
            self.options.auth_provider, BearerAuthProvider
        ):
            await self.options.auth_provider.close()

    async def __aenter__(self) -> "PayrocClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
