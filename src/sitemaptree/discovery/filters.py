"""Relevance filtering for resolved sitemap entries.

Entries first have to pass robots.txt. The survivors are then filtered by
recency, but only when every one of them carries a lastmod: partial lastmod
coverage is treated as unreliable and disables the recency step entirely.
"""

import logging
from datetime import datetime, timezone

from sitemaptree.config import DEFAULT_MAX_AGE_YEARS
from sitemaptree.discovery.robots import RobotsConfig
from sitemaptree.models import FilterResult, SitemapEntry

LOGGER = logging.getLogger(__name__)


def years_before(moment: datetime, years: int) -> datetime:
    """Subtract calendar years, mapping Feb 29 to Feb 28 when needed."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


def filter_entries_by_robots(entries: list[SitemapEntry], robots: RobotsConfig) -> list[SitemapEntry]:
    """Keep entries whose URL robots.txt allows, preserving order."""
    return [entry for entry in entries if robots.is_allowed(entry.url)]


def filter_entries_by_lastmod(entries: list[SitemapEntry], since: datetime) -> list[SitemapEntry]:
    """
    Keep entries modified strictly after ``since``.

    Entries without lastmod are dropped.

    Args:
        entries: Sitemap entries.
        since: Exclusive cutoff; naive values are taken as UTC.

    Returns:
        Filtered entries in their original order.
    """
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return [entry for entry in entries if entry.lastmod is not None and entry.lastmod > since]


def filter_relevant(
    entries: list[SitemapEntry],
    robots: RobotsConfig,
    now: datetime | None = None,
    max_age_years: int = DEFAULT_MAX_AGE_YEARS,
) -> FilterResult:
    """
    Apply robots and recency filtering to resolved entries.

    Args:
        entries: Flat list of resolved sitemap entries.
        robots: Robots policy for the site.
        now: Reference time; defaults to the current UTC time.
        max_age_years: Entries last modified this many years before ``now``
            or earlier are dropped when recency filtering applies.

    Returns:
        FilterResult with the robots-allowed and the final relevant entries.
    """
    LOGGER.info("Starting with %d sitemap entries", len(entries))
    allowed = filter_entries_by_robots(entries, robots)
    LOGGER.info(
        "Removed disallowed URLs: %d entries left (%d removed)",
        len(allowed),
        len(entries) - len(allowed),
    )

    if not all(entry.lastmod is not None for entry in allowed):
        LOGGER.info("Not every entry has lastmod, skipping recency filter")
        return FilterResult(allowed=allowed, relevant=list(allowed))

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    cutoff = years_before(now, max_age_years)
    relevant = filter_entries_by_lastmod(allowed, cutoff)
    LOGGER.info(
        "Reduced to %d entries based on %d year relevancy (cutoff %s)",
        len(relevant),
        max_age_years,
        cutoff.date().isoformat(),
    )
    return FilterResult(allowed=allowed, relevant=relevant, recency_applied=True, cutoff=cutoff)
