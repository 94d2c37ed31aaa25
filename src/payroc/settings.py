"""Configuration management using Pydantic Settings."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from payroc.environments import PayrocEnvironmentUrls, get_environment


def _get_version() -> str:
    try:
        return _pkg_version("payroc")
    except PackageNotFoundError:
        return "0.0.0"


class PayrocSettings(BaseSettings):
    """Payroc client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PAYROC_",
        extra="ignore",
    )

    sdk_version: str = Field(default_factory=_get_version)

    # Credentials
    api_key: str | None = Field(default=None)

    # Environment selection; explicit URLs override the named environment
    environment: str = Field(default="production")
    api_url: str | None = Field(default=None)
    identity_url: str | None = Field(default=None)

    # Transport
    timeout_in_seconds: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=2, ge=0)

    # Error telemetry; nothing is reported unless a DSN is configured
    telemetry: bool = Field(default=True)
    telemetry_dsn: str | None = Field(default=None)

    def environment_urls(self) -> PayrocEnvironmentUrls:
        """Resolve the configured environment, applying URL overrides."""
        base = get_environment(self.environment)
        return PayrocEnvironmentUrls(
            api=self.api_url or base.api,
            identity=self.identity_url or base.identity,
        )
