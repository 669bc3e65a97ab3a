"""Site discovery utilities.

This package provides robots.txt policy handling, sitemap resolution and
relevance filtering.
"""

from sitemaptree.discovery.filters import (
    filter_entries_by_lastmod,
    filter_entries_by_robots,
    filter_relevant,
)
from sitemaptree.discovery.robots import (
    RobotsConfig,
    fetch_robots,
    filter_urls_by_robots,
    is_url_allowed,
    parse_robots_txt,
)
from sitemaptree.discovery.sitemap import (
    SitemapResolver,
    is_sitemap_index,
    parse_sitemap_xml,
)

__all__ = [
    # Filters
    "filter_entries_by_lastmod",
    "filter_entries_by_robots",
    "filter_relevant",
    # Robots
    "RobotsConfig",
    "fetch_robots",
    "filter_urls_by_robots",
    "is_url_allowed",
    "parse_robots_txt",
    # Sitemap
    "SitemapResolver",
    "is_sitemap_index",
    "parse_sitemap_xml",
]
