"""Sitemap parsing and recursive resolution.

This module turns sitemap XML into SitemapEntry objects and walks nested
sitemap indexes down to the page URLs they eventually list.
"""

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from xml.etree import ElementTree

import httpx

from sitemaptree.config import DEFAULT_MAX_DEPTH, IndexDetection
from sitemaptree.exceptions import FetchError, ParseError, SitemapCycleError, SitemapDepthError
from sitemaptree.fetch import fetch_text
from sitemaptree.models import CHANGEFREQ_VALUES, ParsedSitemap, SitemapEntry

LOGGER = logging.getLogger(__name__)

XML_DECLARATION = re.compile(r"<\?xml.*?\?>", re.DOTALL)

# Substring that marks an entry URL as another sitemap when the root tag
# does not say which kind of document this is
INDEX_MARKER = "sitemap"

LASTMOD_FORMATS = [
    "%Y-%m-%dT%H:%M:%S%z",  # Full ISO format with timezone
    "%Y-%m-%dT%H:%M%z",  # W3C datetime without seconds
    "%Y-%m-%dT%H:%M:%S",  # ISO format without timezone
    "%Y-%m-%d",  # Date only
    "%Y-%m",  # Year and month
    "%Y",  # Year only
]


def strip_xml_declaration(text: str) -> str:
    """Remove the leading <?xml ... ?> prologue and any byte order mark."""
    return XML_DECLARATION.sub("", text.lstrip("\ufeff"), count=1).strip()


def parse_sitemap_xml(text: str, url: str | None = None) -> ParsedSitemap:
    """
    Parse sitemap XML into entries.

    Both <urlset> and <sitemapindex> documents are accepted, with or without
    the sitemaps.org namespace. Entries without a <loc> are skipped.

    Args:
        text: Raw sitemap XML.
        url: URL the document came from, used for error context.

    Returns:
        ParsedSitemap with the root kind and entries in document order.

    Raises:
        ParseError: If the content is not well-formed XML.
    """
    body = strip_xml_declaration(text)
    if not body:
        LOGGER.warning("Empty sitemap document: %s", url or "<inline>")
        return ParsedSitemap()

    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as e:
        raise ParseError(f"Malformed sitemap XML at {url or '<inline>'}: {e}", url=url) from e

    tag_name = _strip_namespace(root.tag)
    kind = tag_name if tag_name in ("sitemapindex", "urlset") else None
    if kind is None:
        LOGGER.warning("Unknown sitemap root element %r at %s", tag_name, url or "<inline>")

    entries: list[SitemapEntry] = []
    for child in root:
        if _strip_namespace(child.tag) not in ("url", "sitemap"):
            continue
        entry = _parse_entry_element(child)
        if entry is not None:
            entries.append(entry)

    return ParsedSitemap(kind=kind, entries=entries)


def _parse_entry_element(elem: ElementTree.Element) -> SitemapEntry | None:
    """Parse a single <url> or <sitemap> element into a SitemapEntry."""
    fields: dict[str, str] = {}
    for child in elem:
        name = _strip_namespace(child.tag)
        if child.text and child.text.strip():
            fields[name] = child.text.strip()

    loc = fields.get("loc")
    if not loc:
        return None

    lastmod = None
    if "lastmod" in fields:
        lastmod = _parse_lastmod(fields["lastmod"])

    changefreq = fields.get("changefreq", "").lower() or None
    if changefreq is not None and changefreq not in CHANGEFREQ_VALUES:
        LOGGER.debug("Ignoring unknown changefreq %r for %s", changefreq, loc)
        changefreq = None

    priority = None
    if "priority" in fields:
        try:
            priority = float(fields["priority"])
        except ValueError:
            priority = None
        if priority is not None and not 0.0 <= priority <= 1.0:
            LOGGER.debug("Ignoring out of range priority %s for %s", priority, loc)
            priority = None

    return SitemapEntry(
        url=loc,
        lastmod=lastmod,
        changefreq=changefreq,  # type: ignore[arg-type]
        priority=priority,
    )


def _parse_lastmod(lastmod_str: str) -> datetime | None:
    """Parse lastmod date string in various formats."""
    try:
        return datetime.fromisoformat(lastmod_str)
    except ValueError:
        pass

    for fmt in LASTMOD_FORMATS:
        try:
            return datetime.strptime(lastmod_str, fmt)
        except ValueError:
            continue

    LOGGER.debug("Could not parse lastmod: %s", lastmod_str)
    return None


def _strip_namespace(tag: str) -> str:
    """Remove XML namespace from tag name."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def looks_like_index(entries: list[SitemapEntry]) -> bool:
    """Substring heuristic: every entry URL mentions "sitemap".

    Leaf sitemaps whose page URLs all contain "sitemap" are misclassified;
    prefer the root tag when it is available.
    """
    return bool(entries) and all(INDEX_MARKER in entry.url for entry in entries)


def is_sitemap_index(parsed: ParsedSitemap, detection: IndexDetection = "root") -> bool:
    """
    Decide whether a parsed document lists other sitemaps rather than pages.

    Args:
        parsed: Parsed sitemap document.
        detection: "root" trusts the root element and falls back to the
            substring heuristic for unknown roots; "heuristic" uses only the
            substring heuristic.

    Returns:
        True for a sitemap index.
    """
    if detection == "root" and parsed.kind is not None:
        return parsed.kind == "sitemapindex"
    return looks_like_index(parsed.entries)


class SitemapResolver:
    """Resolve sitemap URLs, following nested indexes, into page entries.

    Resolution is sequential and depth-first. Each sitemap URL is fetched at
    most once per resolver; a URL reached again through another index reuses
    the earlier result, while a URL that reappears among its own ancestors
    raises SitemapCycleError.

    Usage:
        async with create_client() as client:
            resolver = SitemapResolver(client)
            entries = await resolver.resolve("https://example.com/sitemap.xml")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_depth: int = DEFAULT_MAX_DEPTH,
        index_detection: IndexDetection = "root",
    ):
        """Initialize resolver.

        Args:
            client: HTTP client for the current run
            max_depth: Maximum number of nested sitemap documents in one chain
            index_detection: How to tell indexes from leaf sitemaps
        """
        self._client = client
        self._max_depth = max_depth
        self._index_detection = index_detection
        self._resolved: dict[str, list[SitemapEntry]] = {}

    @property
    def fetched_urls(self) -> list[str]:
        """Sitemap URLs resolved so far, in completion order."""
        return list(self._resolved)

    async def resolve(self, sitemap_url: str) -> list[SitemapEntry]:
        """Resolve one sitemap URL into its page entries.

        Args:
            sitemap_url: Absolute URL of a sitemap or sitemap index

        Returns:
            Page entries in resolution order. For an index, only the entries
            of its descendants are returned, never the index's own entries.
        """
        return await self._resolve(sitemap_url.strip(), chain=())

    async def resolve_all(self, sitemap_urls: Iterable[str]) -> list[SitemapEntry]:
        """Resolve several sitemap URLs in order and concatenate the results."""
        entries: list[SitemapEntry] = []
        for sitemap_url in sitemap_urls:
            entries.extend(await self.resolve(sitemap_url))
        return entries

    async def _resolve(self, url: str, chain: tuple[str, ...]) -> list[SitemapEntry]:
        if url in chain:
            raise SitemapCycleError(
                f"Sitemap cycle detected: {url} is listed by one of its own descendants",
                url=url,
                chain=list(chain),
            )

        if url in self._resolved:
            LOGGER.debug("Sitemap %s already resolved, reusing %d entries", url, len(self._resolved[url]))
            return list(self._resolved[url])

        if len(chain) >= self._max_depth:
            raise SitemapDepthError(
                f"Sitemap nesting exceeds max depth {self._max_depth} at {url}",
                url=url,
                depth=len(chain),
            )

        LOGGER.info("Fetching sitemap from %s", url)
        try:
            text = await fetch_text(self._client, url)
        except FetchError as e:
            e.context.setdefault("stage", "sitemap")
            raise

        parsed = parse_sitemap_xml(text, url=url)

        entries: list[SitemapEntry] = []
        if is_sitemap_index(parsed, self._index_detection):
            LOGGER.debug("Sitemap index %s lists %d sitemaps", url, len(parsed.entries))
            child_chain = (*chain, url)
            for nested in parsed.entries:
                entries.extend(await self._resolve(nested.url.strip(), child_chain))
        else:
            LOGGER.debug("Sitemap %s lists %d URLs", url, len(parsed.entries))
            entries.extend(parsed.entries)

        self._resolved[url] = entries
        return list(entries)
