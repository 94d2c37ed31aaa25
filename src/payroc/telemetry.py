"""
Error telemetry for the Payroc client.

Errors raised by resource client calls are reported to Sentry through an
isolated ``sentry_sdk.Client`` and ``Scope``, so an application's own Sentry
setup is never touched. Every event passes through ``before_send``, which
strips credentials and user PII before anything leaves the process.
"""

import functools
import logging
import platform
from typing import Any

import sentry_sdk
from sentry_sdk.scope import Scope, use_scope
from sentry_sdk.transport import Transport
from sentry_sdk.utils import event_from_exception, exc_info_from_error

from payroc.settings import PayrocSettings
from payroc.utils.logging_config import scrub_sensitive_data

logger = logging.getLogger(__name__)

SDK_NAME = "payroc-python"

# Request headers never sent with an event
SENSITIVE_HEADERS = frozenset({"authorization", "x-api-key", "cookie"})

# Seconds to wait for queued events on flush
FLUSH_TIMEOUT = 2.0


def before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """Redact an event and label it with the failing client method."""
    user = event.get("user")
    if isinstance(user, dict):
        user.pop("email", None)
        user.pop("ip_address", None)

    exceptions = (event.get("exception") or {}).get("values") or []
    for exception in exceptions:
        if exception.get("value"):
            exception["value"] = scrub_sensitive_data(exception["value"])

    breadcrumbs = event.get("breadcrumbs")
    if isinstance(breadcrumbs, dict):
        breadcrumbs = breadcrumbs.get("values")
    for breadcrumb in breadcrumbs or []:
        if breadcrumb.get("message"):
            breadcrumb["message"] = scrub_sensitive_data(breadcrumb["message"])
        if "data" in breadcrumb:
            breadcrumb["data"] = {"args": (breadcrumb["data"] or {}).get("args")}

    request = event.get("request")
    if isinstance(request, dict):
        headers = request.get("headers")
        if isinstance(headers, dict):
            request["headers"] = {
                name: value
                for name, value in headers.items()
                if name.lower() not in SENSITIVE_HEADERS
            }
        if "cookies" in request:
            request["cookies"] = {}

    tags = event.get("tags") or {}
    client_path, method = tags.get("client"), tags.get("method")

    # The raised exception comes last; chained causes precede it
    if exceptions:
        parts = []
        if tags.get("http_status"):
            parts.append(f"[{tags['http_status']}]")
        if client_path and method:
            parts.append(f"{client_path}.{method}")
        value = exceptions[-1].get("value") or ""
        if parts and not value.startswith("["):
            exceptions[-1]["value"] = f"{' '.join(parts)} {value}".rstrip()

    if client_path and method:
        event["transaction"] = f"{client_path}.{method}"

    return event


def build_sentry_client(
    dsn: str | None,
    sdk_version: str,
    environment: str | None = None,
    transport: Transport | None = None,
) -> sentry_sdk.Client:
    """
    Create an isolated Sentry client.

    No integrations are installed, so the client does not hook logging,
    excepthooks or other global state of the host application.
    """
    return sentry_sdk.Client(
        dsn,
        transport=transport,
        before_send=before_send,
        default_integrations=False,
        auto_enabling_integrations=False,
        send_default_pii=False,
        attach_stacktrace=True,
        release=f"{SDK_NAME}@{sdk_version}",
        environment=environment,
    )


class Telemetry:
    """Reports client errors and call breadcrumbs to an isolated Sentry client."""

    def __init__(
        self,
        client: sentry_sdk.Client | None = None,
        enabled: bool = True,
        sdk_version: str = "0.0.0",
    ):
        """
        Initialize telemetry.

        Args:
            client: Sentry client to report to; without one nothing is sent
            enabled: Set False to opt out of reporting
            sdk_version: Version reported in tags and contexts
        """
        self._client = client
        self.enabled = enabled and client is not None
        self._scope = Scope(client=client)
        self._scope.set_tag("sdk", SDK_NAME)
        self._scope.set_tag("sdk_version", sdk_version)
        self._scope.set_tag("runtime_version", platform.python_version())
        self._scope.set_context(
            "sdk_info",
            {
                "name": SDK_NAME,
                "version": sdk_version,
                "runtime": platform.python_implementation(),
                "runtime_version": platform.python_version(),
            },
        )

    @classmethod
    def from_settings(
        cls, settings: PayrocSettings, enabled: bool | None = None
    ) -> "Telemetry":
        """Build from settings; ``enabled`` overrides ``settings.telemetry``."""
        enabled = settings.telemetry if enabled is None else enabled
        if not enabled or not settings.telemetry_dsn:
            return cls(enabled=False, sdk_version=settings.sdk_version)

        client = build_sentry_client(
            settings.telemetry_dsn,
            settings.sdk_version,
            environment=settings.environment,
        )
        return cls(client, sdk_version=settings.sdk_version)

    def add_breadcrumb(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Record a client operation; attached to the next captured error."""
        if not self.enabled:
            return

        try:
            # Breadcrumbs are only kept while our client is the current one
            with use_scope(self._scope):
                self._scope.add_breadcrumb(
                    category="sdk.operation",
                    message=message,
                    level="info",
                    data=data or {},
                )
        except Exception as e:
            logger.debug(f"Failed to record telemetry breadcrumb: {e}")

    def capture_error(
        self, error: BaseException, context: dict[str, str] | None = None
    ) -> str | None:
        """
        Report an error with client/method tags and response context.

        Args:
            error: The raised exception
            context: Tags such as ``client``, ``method`` or ``phase``

        Returns:
            The Sentry event id, or None when nothing was sent
        """
        if not self.enabled:
            return None

        error_context: dict[str, Any] = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        tags = dict(context or {})

        status_code = getattr(error, "status_code", None)
        if status_code is not None:
            error_context["http_status_code"] = status_code
            tags["http_status"] = str(status_code)
        reason = getattr(error, "reason", None)
        if reason is not None:
            error_context["fetch_reason"] = reason

        try:
            event, hint = event_from_exception(
                exc_info_from_error(error), client_options=self._client.options
            )
            event["tags"] = tags
            event["contexts"] = {"payroc_error": error_context}
            event["fingerprint"] = [
                "{{ default }}",
                tags.get("method", "unknown"),
                str(status_code) if status_code is not None else "no-status",
            ]
            return self._client.capture_event(event, hint=hint, scope=self._scope)
        except Exception as e:
            logger.warning(f"Failed to report error to telemetry: {e}")
            return None

    def flush(self, timeout: float = FLUSH_TIMEOUT) -> None:
        """Block until queued events are sent or ``timeout`` elapses."""
        if self._client is not None:
            self._client.flush(timeout=timeout)

    def close(self) -> None:
        """Flush and shut down the Sentry client."""
        if self._client is not None:
            self._client.close(timeout=FLUSH_TIMEOUT)
            self._client = None
            self.enabled = False


def instrumented(method):
    """
    Report errors raised by an async resource client method.

    The decorated method's owner must expose ``telemetry`` and
    ``telemetry_path``. Each call adds a breadcrumb; a raised error is
    captured with ``client``/``method`` tags and then re-raised unchanged.
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        telemetry: Telemetry = self.telemetry
        telemetry.add_breadcrumb(
            f"{self.telemetry_path}.{method.__name__}",
            {"args": len(args) + len(kwargs)},
        )
        try:
            return await method(self, *args, **kwargs)
        except Exception as e:
            telemetry.capture_error(
                e, {"client": self.telemetry_path, "method": method.__name__}
            )
            raise

    return wrapper
