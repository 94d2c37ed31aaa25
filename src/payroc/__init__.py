"""
payroc - Payroc API client with link-relation pagination.
"""

__version__ = "1.0.0"

from .errors import (
    AuthenticationError,
    ConfigurationError,
    NoSuchPageError,
    PageFetchError,
    PayrocError,
)
from .environments import PayrocEnvironment, PayrocEnvironmentUrls
from .settings import PayrocSettings
from .core.auth import AuthProvider, AuthRequest, BearerAuthProvider, StaticAuthProvider
from .core.fetcher import APIResponse, FetchError, FetchRequest, HttpxFetcher, RawResponse
from .core.options import ClientOptions
from .core.pagination import Pager, ParsedPage, create_pager, parse_link_response
from .telemetry import Telemetry
from .client import PayrocClient

__all__ = [
    "__version__",
    "APIResponse",
    "AuthProvider",
    "AuthRequest",
    "AuthenticationError",
    "BearerAuthProvider",
    "ClientOptions",
    "ConfigurationError",
    "FetchError",
    "FetchRequest",
    "HttpxFetcher",
    "NoSuchPageError",
    "PageFetchError",
    "Pager",
    "ParsedPage",
    "PayrocClient",
    "PayrocEnvironment",
    "PayrocEnvironmentUrls",
    "PayrocError",
    "PayrocSettings",
    "RawResponse",
    "StaticAuthProvider",
    "Telemetry",
    "create_pager",
    "parse_link_response",
]
