"""Discovery service: robots.txt and sitemaps to a path tree."""

import logging
from datetime import datetime

import httpx

from sitemaptree.config import DiscoveryConfig
from sitemaptree.discovery.filters import filter_relevant
from sitemaptree.discovery.robots import fetch_robots
from sitemaptree.discovery.sitemap import SitemapResolver
from sitemaptree.fetch import create_client
from sitemaptree.models import DiscoveryResult
from sitemaptree.tree import build_site_tree, tree_depth

LOGGER = logging.getLogger(__name__)


class DiscoveryService:
    """Discover the crawlable URLs of a site and arrange them as a tree.

    Usage:
        config = load_discovery_config(site_url="https://example.com/")
        service = DiscoveryService(config)
        result = await service.discover()
        print(result.unique_urls, result.tree)

    Any fetch, parse or policy failure aborts the run and propagates as a
    SitemapTreeError subclass.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize discovery service.

        Args:
            config: Discovery settings
            client: Optional HTTP client (created per run if not provided)
            transport: Optional transport for the created client
        """
        self._config = config
        self._client = client
        self._transport = transport

    async def discover(self, site_url: str | None = None, now: datetime | None = None) -> DiscoveryResult:
        """Run the full discovery pipeline.

        Args:
            site_url: Site to discover; defaults to the configured site URL
            now: Reference time for recency filtering (defaults to now)

        Returns:
            DiscoveryResult with stage counts, unique URLs and the path tree
        """
        site_url = site_url or self._config.site_url

        if self._client is not None:
            return await self._discover(self._client, site_url, now)

        async with create_client(
            timeout=self._config.timeout,
            user_agent=self._config.user_agent,
            transport=self._transport,
        ) as client:
            return await self._discover(client, site_url, now)

    async def _discover(
        self,
        client: httpx.AsyncClient,
        site_url: str,
        now: datetime | None,
    ) -> DiscoveryResult:
        robots = await fetch_robots(client, site_url, on_missing=self._config.missing_robots)
        if not robots.sitemaps:
            LOGGER.warning("robots.txt for %s declares no sitemaps", site_url)

        resolver = SitemapResolver(
            client,
            max_depth=self._config.max_depth,
            index_detection=self._config.index_detection,
        )
        entries = await resolver.resolve_all(robots.sitemaps)
        LOGGER.info(
            "Resolved %d entries from %d sitemap documents",
            len(entries),
            len(resolver.fetched_urls),
        )

        filtered = filter_relevant(
            entries,
            robots,
            now=now,
            max_age_years=self._config.max_age_years,
        )

        urls = [entry.url for entry in filtered.relevant]
        unique_urls = list(dict.fromkeys(urls))
        LOGGER.info("Found %d unique URLs", len(unique_urls))

        # Built from every filtered URL; insertion is idempotent for duplicates
        tree = build_site_tree(urls)
        LOGGER.debug("Built tree with %d top-level segments, depth %d", len(tree), tree_depth(tree))

        return DiscoveryResult(
            site_url=site_url,
            sitemap_urls=list(robots.sitemaps),
            discovered=len(entries),
            allowed=len(filtered.allowed),
            relevant=len(filtered.relevant),
            recency_applied=filtered.recency_applied,
            cutoff=filtered.cutoff,
            unique_urls=unique_urls,
            tree=tree,
        )
