"""Discover a website's URLs from robots.txt and sitemaps and render them as a path tree."""

from sitemaptree.config import DiscoveryConfig, load_discovery_config
from sitemaptree.models import DiscoveryResult, SitemapEntry, SiteTree
from sitemaptree.services.discover import DiscoveryService
from sitemaptree.tree import build_site_tree

__version__ = "0.1.0"

__all__ = [
    "DiscoveryConfig",
    "DiscoveryResult",
    "DiscoveryService",
    "SiteTree",
    "SitemapEntry",
    "build_site_tree",
    "load_discovery_config",
]
