"""Data models for sitemaptree."""

from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

ChangeFreq: TypeAlias = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]

# Nested mapping from path segment to child nodes. Purely structural: no
# payload and no leaf marker, so "/a" next to "/a/b" looks like "/a" with
# one child.
SiteTree: TypeAlias = dict[str, "SiteTree"]

CHANGEFREQ_VALUES: frozenset[str] = frozenset({"always", "hourly", "daily", "weekly", "monthly", "yearly", "never"})


class SitemapEntry(BaseModel):
    """A single <url> or <sitemap> entry parsed from a sitemap document.

    Entries are immutable once parsed. Identity is the URL; the same URL may
    appear in several sitemaps.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    lastmod: datetime | None = None
    changefreq: ChangeFreq | None = None
    priority: float | None = Field(default=None, ge=0.0, le=1.0)

    @field_validator("lastmod")
    @classmethod
    def _ensure_aware(cls, value: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC so comparisons never mix kinds."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ParsedSitemap(BaseModel):
    """Result of parsing one sitemap document."""

    # Root element name without namespace, None for anything unexpected
    kind: Literal["sitemapindex", "urlset"] | None = None
    entries: list[SitemapEntry] = Field(default_factory=list)


class FilterResult(BaseModel):
    """Outcome of robots and recency filtering."""

    allowed: list[SitemapEntry]
    relevant: list[SitemapEntry]
    recency_applied: bool = False
    cutoff: datetime | None = None


class DiscoveryResult(BaseModel):
    """Result of a full discovery run for one site."""

    site_url: str
    sitemap_urls: list[str] = Field(default_factory=list)
    discovered: int = 0
    allowed: int = 0
    relevant: int = 0
    recency_applied: bool = False
    cutoff: datetime | None = None
    unique_urls: list[str] = Field(default_factory=list)
    tree: dict[str, Any] = Field(default_factory=dict)
