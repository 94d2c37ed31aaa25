"""Payroc environment URLs."""

from dataclasses import dataclass

from payroc.errors import ConfigurationError


@dataclass(frozen=True)
class PayrocEnvironmentUrls:
    """Base URLs of the API and identity services for one environment."""

    api: str
    identity: str


class PayrocEnvironment:
    """Known Payroc environments."""

    PRODUCTION = PayrocEnvironmentUrls(
        api="https://api.payroc.com/v1",
        identity="https://identity.payroc.com",
    )
    UAT = PayrocEnvironmentUrls(
        api="https://api.uat.payroc.com/v1",
        identity="https://identity.uat.payroc.com",
    )


_ENVIRONMENTS = {
    "production": PayrocEnvironment.PRODUCTION,
    "uat": PayrocEnvironment.UAT,
}


def get_environment(name: str) -> PayrocEnvironmentUrls:
    """
    Resolve an environment by name.

    Args:
        name: "production" or "uat" (case-insensitive)

    Raises:
        ConfigurationError: If the name is unknown
    """
    try:
        return _ENVIRONMENTS[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown Payroc environment '{name}'",
            suggestion=f"Use one of: {', '.join(sorted(_ENVIRONMENTS))}",
        ) from None
