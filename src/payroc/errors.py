"""
Unified error handling for the Payroc client.
"""


class PayrocError(Exception):
    """Base exception for Payroc client errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}. {self.suggestion}"
        return self.message


class PageFetchError(PayrocError):
    """A page could not be fetched from the API."""

    def __init__(
        self,
        message: str,
        reason: str,
        status_code: int | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(message, suggestion)
        self.reason = reason
        self.status_code = status_code


class NoSuchPageError(PayrocError):
    """Navigation was requested in a direction with no available page."""

    pass


class AuthenticationError(PayrocError):
    """Authentication or authorization error."""

    pass


class ConfigurationError(PayrocError):
    """Configuration error."""

    pass


def format_api_error(status_code: int, message: str = "") -> str:
    """Format an API error with appropriate message."""
    error_messages = {
        400: "Bad request. Please check your input parameters.",
        401: "Authentication required. Please set PAYROC_API_KEY.",
        403: "Access denied. You don't have permission to perform this action.",
        404: "Resource not found. Please check the requested resource.",
        429: "Rate limit exceeded. Please wait before making more requests.",
        500: "Payroc server error. Please try again later.",
        503: "Payroc service unavailable. Please try again later.",
    }

    default_message = f"API error (status {status_code})"
    base_message = error_messages.get(status_code, default_message)

    if message:
        return f"Error: {base_message} Details: {message}"
    return f"Error: {base_message}"
