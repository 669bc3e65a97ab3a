"""Discovery configuration management."""

import os
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias
from urllib.parse import urlsplit

from sitemaptree.exceptions import ConfigurationError, generate_correlation_id

MissingRobotsPolicy: TypeAlias = Literal["fail", "allow"]
IndexDetection: TypeAlias = Literal["root", "heuristic"]

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_DEPTH = 10
DEFAULT_MAX_AGE_YEARS = 2
DEFAULT_USER_AGENT = "SitemapTreeBot/1.0"

# Environment variable for each DiscoveryConfig field
ENV_VARS: dict[str, str] = {
    "site_url": "SITEMAPTREE_SITE_URL",
    "timeout": "SITEMAPTREE_TIMEOUT",
    "max_depth": "SITEMAPTREE_MAX_DEPTH",
    "max_age_years": "SITEMAPTREE_MAX_AGE_YEARS",
    "missing_robots": "SITEMAPTREE_MISSING_ROBOTS",
    "index_detection": "SITEMAPTREE_INDEX_DETECTION",
    "user_agent": "SITEMAPTREE_USER_AGENT",
}


@dataclass(frozen=True)
class DiscoveryConfig:
    """Immutable discovery configuration."""

    site_url: str
    timeout: float = DEFAULT_TIMEOUT
    max_depth: int = DEFAULT_MAX_DEPTH
    max_age_years: int = DEFAULT_MAX_AGE_YEARS
    missing_robots: MissingRobotsPolicy = "fail"
    index_detection: IndexDetection = "root"
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        """Validate configuration after initialisation."""
        parsed = urlsplit(self.site_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"Site URL must be an absolute http(s) URL, got {self.site_url!r}",
                setting="site_url",
            )
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive", setting="timeout", context={"value": self.timeout})
        if self.max_depth < 1:
            raise ConfigurationError(
                "Max depth must be at least 1", setting="max_depth", context={"value": self.max_depth}
            )
        if self.max_age_years < 0:
            raise ConfigurationError(
                "Max age must not be negative", setting="max_age_years", context={"value": self.max_age_years}
            )
        if self.missing_robots not in ("fail", "allow"):
            raise ConfigurationError(
                f"Invalid missing robots policy: {self.missing_robots}. Must be one of: fail, allow",
                setting="missing_robots",
            )
        if self.index_detection not in ("root", "heuristic"):
            raise ConfigurationError(
                f"Invalid index detection: {self.index_detection}. Must be one of: root, heuristic",
                setting="index_detection",
            )

    @property
    def origin(self) -> str:
        """Scheme and host of the site, e.g. "https://example.com"."""
        parsed = urlsplit(self.site_url)
        return f"{parsed.scheme}://{parsed.netloc}"


def _read_number(field: str, cast: type[int] | type[float]) -> int | float | None:
    env_var = ENV_VARS[field]
    raw = os.getenv(env_var)
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"Invalid {env_var}: {raw!r} is not a valid {cast.__name__}",
            setting=field,
            correlation_id=generate_correlation_id(),
        ) from None


def load_discovery_config(**overrides: Any) -> DiscoveryConfig:
    """
    Load discovery configuration from environment variables.

    Explicit keyword overrides (typically CLI options) win over the
    environment; overrides set to None are ignored.

    Returns:
        DiscoveryConfig with validated settings.

    Raises:
        ConfigurationError: If the site URL is missing or a value is invalid.
    """
    values: dict[str, Any] = {}

    for field in ("site_url", "missing_robots", "index_detection", "user_agent"):
        raw = os.getenv(ENV_VARS[field])
        if raw and raw.strip():
            value = raw.strip()
            values[field] = value.lower() if field in ("missing_robots", "index_detection") else value

    for field, cast in (("timeout", float), ("max_depth", int), ("max_age_years", int)):
        number = _read_number(field, cast)
        if number is not None:
            values[field] = number

    unknown = set(overrides) - set(ENV_VARS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration settings: {', '.join(sorted(unknown))}")
    values.update({key: value for key, value in overrides.items() if value is not None})

    if not values.get("site_url"):
        raise ConfigurationError(
            f"No site URL configured. Pass it as an argument or set {ENV_VARS['site_url']}",
            setting="site_url",
        )

    return DiscoveryConfig(**values)
