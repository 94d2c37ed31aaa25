"""
Bidirectional pager over link-relation paginated list endpoints.

A ``Pager`` holds exactly one page at a time. Moving to another page fetches
it, parses it, and replaces the whole page state in one step; a failed fetch
leaves the previous page in place.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass
import inspect
import logging
from typing import Any, Generic, TypeVar

from payroc.core.auth import AuthProvider
from payroc.core.fetcher import FetchError, FetchRequest, PageFetcher, RawResponse
from payroc.core.headers import merge_headers, merge_only_defined_headers
from payroc.core.options import ClientOptions
from payroc.core.pagination.links import ParsedPage, ResponseParser, parse_link_response
from payroc.errors import NoSuchPageError, PageFetchError

logger = logging.getLogger(__name__)

TItem = TypeVar("TItem")
TResponse = TypeVar("TResponse")


@dataclass(frozen=True)
class PageState:
    """Snapshot of the current page and how to leave it."""

    response: Any
    raw_response: RawResponse | None
    data: list[Any]
    has_next_page: bool
    has_previous_page: bool
    next_request: FetchRequest | None
    previous_request: FetchRequest | None

    @classmethod
    def from_parsed(
        cls, response: Any, raw_response: RawResponse | None, parsed: ParsedPage
    ) -> "PageState":
        # A direction is only available when there is a request to follow
        has_next = bool(parsed.has_next_page and parsed.next_request is not None)
        has_previous = bool(
            parsed.has_previous_page and parsed.previous_request is not None
        )
        return cls(
            response=response,
            raw_response=raw_response,
            data=parsed.items,
            has_next_page=has_next,
            has_previous_page=has_previous,
            next_request=parsed.next_request if has_next else None,
            previous_request=parsed.previous_request if has_previous else None,
        )


async def _fetch_page(
    fetcher: PageFetcher,
    request: FetchRequest,
    parser: ResponseParser,
    failure_message: str,
) -> PageState:
    logger.debug(f"Fetching page: {request.method} {request.url}")

    response = await fetcher(request)
    if not response.ok:
        error = response.error or FetchError(reason="unknown")
        reason = error.describe()
        logger.warning(f"{failure_message}: {reason}")
        raise PageFetchError(
            f"{failure_message}: {reason}",
            reason=error.reason,
            status_code=error.status_code,
        )

    parsed = parser(request, response.body, response.raw_response)
    if inspect.isawaitable(parsed):
        parsed = await parsed

    logger.debug(
        f"Fetched {len(parsed.items)} items "
        f"(next={parsed.has_next_page}, previous={parsed.has_previous_page})"
    )
    return PageState.from_parsed(response.body, response.raw_response, parsed)


class Pager(Generic[TItem, TResponse]):
    """
    Navigates a paginated result set one page at a time.

    ``async for item in pager`` walks every item from the current page
    forward, fetching each following page only once the previous one has
    been consumed. Calls on one pager must not overlap: await each
    navigation before starting the next.
    """

    def __init__(
        self,
        state: PageState,
        fetcher: PageFetcher,
        auth_provider: AuthProvider | None = None,
        parser: ResponseParser = parse_link_response,
    ):
        self._state = state
        self._fetcher = fetcher
        self._auth_provider = auth_provider
        self._parser = parser

    def __repr__(self) -> str:
        return (
            f"Pager(items={len(self._state.data)}, "
            f"has_next_page={self._state.has_next_page}, "
            f"has_previous_page={self._state.has_previous_page})"
        )

    @property
    def data(self) -> list[TItem]:
        """Items of the current page."""
        return self._state.data

    @property
    def response(self) -> TResponse:
        """Decoded body of the current page."""
        return self._state.response

    @property
    def raw_response(self) -> RawResponse | None:
        """Transport metadata of the current page."""
        return self._state.raw_response

    def get_current_page(self) -> list[TItem]:
        """Alias for ``data``."""
        return self._state.data

    def has_next_page(self) -> bool:
        return self._state.has_next_page

    def has_previous_page(self) -> bool:
        return self._state.has_previous_page

    async def get_next_page(self) -> "Pager[TItem, TResponse]":
        """
        Move to the next page.

        Returns:
            This pager, now holding the next page

        Raises:
            NoSuchPageError: If there is no next page (nothing is fetched)
            PageFetchError: If the fetch fails; the current page is kept
        """
        if not self._state.has_next_page or self._state.next_request is None:
            raise NoSuchPageError("No next page available")
        await self._load(self._state.next_request)
        return self

    async def get_previous_page(self) -> "Pager[TItem, TResponse]":
        """
        Move to the previous page.

        Returns:
            This pager, now holding the previous page

        Raises:
            NoSuchPageError: If there is no previous page (nothing is fetched)
            PageFetchError: If the fetch fails; the current page is kept
        """
        if not self._state.has_previous_page or self._state.previous_request is None:
            raise NoSuchPageError("No previous page available")
        await self._load(self._state.previous_request)
        return self

    async def _load(self, request: FetchRequest) -> None:
        if self._auth_provider is not None:
            auth_request = await self._auth_provider.get_auth_request()
            request = request.model_copy(
                update={
                    "headers": merge_headers(
                        request.headers,
                        merge_only_defined_headers(auth_request.headers),
                    )
                }
            )

        self._state = await _fetch_page(
            self._fetcher, request, self._parser, "Failed to fetch page"
        )

    def __aiter__(self) -> AsyncIterator[TItem]:
        return self._iter_items()

    async def _iter_items(self) -> AsyncIterator[TItem]:
        for item in self.data:
            yield item

        async for page in self.iter_next_pages():
            for item in page:
                yield item

    async def iter_next_pages(self) -> AsyncIterator[list[TItem]]:
        """Fetch and yield each following page's items, one page per step."""
        while self.has_next_page():
            await self.get_next_page()
            yield self.data

    async def iter_previous_pages(self) -> AsyncIterator[list[TItem]]:
        """Fetch and yield each preceding page's items, one page per step."""
        while self.has_previous_page():
            await self.get_previous_page()
            yield self.data


async def create_pager(
    fetcher: PageFetcher,
    initial_request: FetchRequest,
    options: ClientOptions | None = None,
    parser: ResponseParser | None = None,
) -> Pager[Any, Any]:
    """
    Fetch the first page and wrap it in a ``Pager``.

    The initial request is sent as given; the auth provider from ``options``
    is only consulted for follow-up requests.

    Args:
        fetcher: Performs one HTTP round trip per request
        initial_request: Request for the first page
        options: Client options; supplies the auth provider
        parser: Custom response parser (defaults to link relations)

    Raises:
        PageFetchError: If the first page cannot be fetched
    """
    parser = parser or parse_link_response
    state = await _fetch_page(
        fetcher, initial_request, parser, "Failed to fetch initial page"
    )
    return Pager(
        state,
        fetcher,
        auth_provider=options.auth_provider if options else None,
        parser=parser,
    )
