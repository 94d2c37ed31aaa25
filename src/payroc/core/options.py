"""Client-level options shared by every request a client issues."""

from dataclasses import dataclass, field

from payroc.core.auth import AuthProvider
from payroc.environments import PayrocEnvironment, PayrocEnvironmentUrls
from payroc.settings import PayrocSettings


@dataclass
class ClientOptions:
    """Normalized client configuration."""

    environment: PayrocEnvironmentUrls = PayrocEnvironment.PRODUCTION
    auth_provider: AuthProvider | None = None
    timeout_in_seconds: float = 60.0
    max_retries: int = 2
    headers: dict[str, str] = field(default_factory=dict)
    telemetry: bool = True

    @classmethod
    def from_settings(cls, settings: PayrocSettings) -> "ClientOptions":
        return cls(
            environment=settings.environment_urls(),
            timeout_in_seconds=settings.timeout_in_seconds,
            max_retries=settings.max_retries,
            headers={"X-Payroc-SDK-Version": settings.sdk_version},
            telemetry=settings.telemetry,
        )
