"""robots.txt parsing and compliance utilities.

This module fetches a site's robots.txt, parses the rules that apply to a
user agent, and answers allow/deny questions for discovered URLs.
"""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

import httpx

from sitemaptree.config import MissingRobotsPolicy
from sitemaptree.exceptions import FetchError, PolicyError
from sitemaptree.fetch import fetch_text

LOGGER = logging.getLogger(__name__)


@dataclass
class RobotsConfig:
    """
    Parsed robots.txt configuration.

    Attributes:
        user_agent: User agent these rules apply to.
        sitemaps: Sitemap URLs from Sitemap directives, in declaration order.
        disallow_patterns: URL patterns that are disallowed.
        allow_patterns: URL patterns that are explicitly allowed.
        origin: "scheme://host" the rules were served from. When set, URLs
            on any other origin are not allowed.
    """

    user_agent: str = "*"
    sitemaps: list[str] = field(default_factory=list)
    disallow_patterns: list[str] = field(default_factory=list)
    allow_patterns: list[str] = field(default_factory=list)
    origin: str | None = None

    def is_allowed(self, url: str) -> bool:
        """Return True if robots rules allow fetching ``url``."""
        return is_url_allowed(url, self)


def origin_of(url: str) -> str:
    """Return the lowercased "scheme://host[:port]" of ``url``."""
    parsed = urlsplit(url)
    return f"{parsed.scheme}://{parsed.netloc}".lower()


def robots_url_for(site_url: str) -> str:
    """Return the robots.txt URL at the origin of ``site_url``."""
    return f"{origin_of(site_url)}/robots.txt"


async def fetch_robots(
    client: httpx.AsyncClient,
    site_url: str,
    on_missing: MissingRobotsPolicy = "fail",
    user_agent: str = "*",
) -> RobotsConfig:
    """
    Fetch and parse robots.txt for a site.

    Args:
        client: HTTP client for the current run.
        site_url: Any URL on the site (e.g., "https://example.com/").
        on_missing: What to do on a 404: "fail" raises, "allow" returns an
            empty allow-all policy with no sitemaps.
        user_agent: User agent whose rule group is applied.

    Returns:
        RobotsConfig with parsed rules.

    Raises:
        PolicyError: If robots.txt cannot be retrieved.
    """
    origin = origin_of(site_url)
    robots_url = robots_url_for(site_url)

    try:
        content = await fetch_text(client, robots_url)
    except FetchError as e:
        if e.status_code == 404 and on_missing == "allow":
            LOGGER.warning("No robots.txt found at %s (404), allowing all URLs", robots_url)
            return RobotsConfig(user_agent=user_agent, origin=origin)
        raise PolicyError(
            f"Could not retrieve robots.txt: {e.message}",
            url=robots_url,
            correlation_id=e.correlation_id,
            context={"status_code": e.status_code} if e.status_code is not None else None,
        ) from e

    robots = parse_robots_txt(content, user_agent=user_agent, origin=origin)
    LOGGER.info(
        "Loaded robots.txt from %s: %d sitemaps, %d disallow rules",
        robots_url,
        len(robots.sitemaps),
        len(robots.disallow_patterns),
    )
    return robots


def parse_robots_txt(content: str, user_agent: str = "*", origin: str | None = None) -> RobotsConfig:
    """
    Parse robots.txt content.

    Crawl-delay, Request-rate and unknown directives are ignored.

    Args:
        content: Raw robots.txt content.
        user_agent: User agent to match rules for.
        origin: Origin the file was served from, if known.

    Returns:
        RobotsConfig with parsed rules.
    """
    config = RobotsConfig(user_agent=user_agent, origin=origin.lower() if origin else None)
    wanted = user_agent.lower()

    # A specific group for our agent replaces the "*" group entirely
    has_specific_group = False
    if wanted != "*":
        for line in content.splitlines():
            parsed = _split_directive(line)
            if parsed is not None and parsed[0] == "user-agent" and parsed[1].lower() == wanted:
                has_specific_group = True
                break

    # Consecutive User-agent lines share one group
    group_agents: list[str] = []
    in_rules = False

    for raw_line in content.splitlines():
        parsed = _split_directive(raw_line)
        if parsed is None:
            continue
        directive, value = parsed

        if directive == "user-agent":
            if in_rules:
                group_agents = []
                in_rules = False
            group_agents.append(value.lower())
            continue

        if directive == "sitemap":
            # Sitemap directives are global
            if value and value not in config.sitemaps:
                config.sitemaps.append(value)
            continue

        in_rules = True
        if not group_agents:
            continue

        if has_specific_group:
            is_matching = wanted in group_agents
        else:
            is_matching = "*" in group_agents or wanted in group_agents
        if not is_matching:
            continue

        if directive == "disallow" and value:
            config.disallow_patterns.append(value)

        elif directive == "allow" and value:
            config.allow_patterns.append(value)

    return config


def _split_directive(line: str) -> tuple[str, str] | None:
    """Split a robots.txt line into (directive, value), dropping comments."""
    line = line.split("#", 1)[0].strip()
    if not line or ":" not in line:
        return None
    directive, value = line.split(":", 1)
    return directive.strip().lower(), value.strip()


def is_url_allowed(
    url: str,
    robots: RobotsConfig,
) -> bool:
    """
    Check if URL is allowed by robots.txt rules.

    The longest matching pattern decides (RFC 9309). A trailing "$" does not
    count towards the length, and Allow wins a tie. URLs outside the origin
    the rules came from are never allowed.

    Args:
        url: URL to check.
        robots: Parsed robots configuration.

    Returns:
        True if URL is allowed, False if disallowed.
    """
    if robots.origin is not None and origin_of(url) != robots.origin:
        LOGGER.debug("Skipping URL outside robots.txt origin %s: %s", robots.origin, url)
        return False

    parsed = urlsplit(url)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"

    allow_length = _longest_match(path, robots.allow_patterns)
    disallow_length = _longest_match(path, robots.disallow_patterns)
    return allow_length >= disallow_length


def _longest_match(path: str, patterns: list[str]) -> int:
    """Return the length of the longest pattern matching ``path``, or -1."""
    return max(
        (len(pattern.removesuffix("$")) for pattern in patterns if _matches_pattern(path, pattern)),
        default=-1,
    )


def _matches_pattern(path: str, pattern: str) -> bool:
    """
    Check if path matches a robots.txt pattern.

    Handles:
    - Exact prefix matching
    - * wildcard (matches any sequence)
    - $ end anchor

    Args:
        path: URL path to check.
        pattern: robots.txt pattern.

    Returns:
        True if pattern matches.
    """
    if not pattern:
        return False

    has_end_anchor = pattern.endswith("$")
    if has_end_anchor:
        pattern = pattern[:-1]

    if "*" in pattern:
        # Escape regex special chars except *
        regex_pattern = "^" + re.escape(pattern).replace(r"\*", ".*")
        if has_end_anchor:
            regex_pattern += "$"
        return re.match(regex_pattern, path) is not None

    if has_end_anchor:
        return path == pattern
    return path.startswith(pattern)


def filter_urls_by_robots(
    urls: list[str],
    robots: RobotsConfig,
    log_skipped: bool = True,
) -> tuple[list[str], list[str]]:
    """
    Filter URLs based on robots.txt rules.

    Args:
        urls: List of URLs to filter.
        robots: Parsed robots configuration.
        log_skipped: Whether to log skipped URLs.

    Returns:
        Tuple of (allowed_urls, disallowed_urls).
    """
    allowed: list[str] = []
    disallowed: list[str] = []

    for url in urls:
        if is_url_allowed(url, robots):
            allowed.append(url)
        else:
            disallowed.append(url)
            if log_skipped:
                LOGGER.debug("Skipping URL (robots.txt): %s", url)

    return allowed, disallowed
