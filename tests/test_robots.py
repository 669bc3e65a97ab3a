"""Tests for robots.txt parsing and policy enforcement."""

import pytest

from sitemaptree.discovery.robots import (
    RobotsConfig,
    fetch_robots,
    filter_urls_by_robots,
    is_url_allowed,
    parse_robots_txt,
    robots_url_for,
)
from sitemaptree.exceptions import PolicyError

ROBOTS_TXT = """
# Example robots file
User-agent: *
Disallow: /checkout/*
Disallow: /private   # inline comment
Allow: /private/press

User-agent: BadBot
Disallow: /

Sitemap: https://example.com/sitemap.xml
Sitemap: https://example.com/news-sitemap.xml
Sitemap: https://example.com/sitemap.xml
"""


class TestParseRobotsTxt:
    """Tests for parse_robots_txt."""

    def test_collects_sitemaps_in_order_without_duplicates(self) -> None:
        """Test that Sitemap directives are global, ordered and deduplicated."""
        robots = parse_robots_txt(ROBOTS_TXT)
        assert robots.sitemaps == [
            "https://example.com/sitemap.xml",
            "https://example.com/news-sitemap.xml",
        ]

    def test_wildcard_group_rules(self) -> None:
        """Test that only the * group applies to the default agent."""
        robots = parse_robots_txt(ROBOTS_TXT)
        assert robots.disallow_patterns == ["/checkout/*", "/private"]
        assert robots.allow_patterns == ["/private/press"]

    def test_specific_agent_group_replaces_wildcard(self) -> None:
        """Test that a matching named group is used instead of *."""
        robots = parse_robots_txt(ROBOTS_TXT, user_agent="BadBot")
        assert robots.disallow_patterns == ["/"]
        assert robots.allow_patterns == []

    def test_consecutive_user_agents_share_group(self) -> None:
        """Test that stacked User-agent lines share the following rules."""
        content = "User-agent: a\nUser-agent: *\nDisallow: /shared\n"
        robots = parse_robots_txt(content)
        assert robots.disallow_patterns == ["/shared"]

    def test_rules_before_user_agent_are_ignored(self) -> None:
        """Test that orphan rules do not apply."""
        robots = parse_robots_txt("Disallow: /orphan\nUser-agent: *\nDisallow: /real\n")
        assert robots.disallow_patterns == ["/real"]

    def test_empty_disallow_allows_everything(self) -> None:
        """Test that an empty Disallow adds no pattern."""
        robots = parse_robots_txt("User-agent: *\nDisallow:\n")
        assert robots.disallow_patterns == []
        assert robots.is_allowed("https://example.com/anything")

    def test_crawl_delay_and_request_rate_are_ignored(self) -> None:
        """Test that rate directives do not disturb the rule group."""
        robots = parse_robots_txt("User-agent: *\nCrawl-delay: 5\nRequest-rate: 1/10\nDisallow: /tmp\n")
        assert robots.disallow_patterns == ["/tmp"]
        assert robots.allow_patterns == []

    def test_origin_is_normalised(self) -> None:
        robots = parse_robots_txt("User-agent: *\n", origin="HTTPS://Example.com")
        assert robots.origin == "https://example.com"


class TestIsUrlAllowed:
    """Tests for is_url_allowed."""

    @pytest.fixture
    def robots(self) -> RobotsConfig:
        return parse_robots_txt(ROBOTS_TXT)

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://example.com/a", True),
            ("https://example.com/checkout/cart", False),
            ("https://example.com/checkout", True),
            ("https://example.com/private/data", False),
            ("https://example.com/private/press/2024", True),
            ("https://example.com/", True),
        ],
    )
    def test_patterns(self, robots: RobotsConfig, url: str, expected: bool) -> None:
        """Test prefix, wildcard and allow precedence."""
        assert is_url_allowed(url, robots) is expected
        assert robots.is_allowed(url) is expected

    def test_longer_disallow_beats_allow_all(self) -> None:
        """Test that "Allow: /" does not override a more specific Disallow."""
        robots = parse_robots_txt("User-agent: *\nAllow: /\nDisallow: /checkout/\n")
        assert not robots.is_allowed("https://example.com/checkout/cart")
        assert robots.is_allowed("https://example.com/products/1")

    def test_longer_disallow_beats_shorter_allow(self) -> None:
        robots = parse_robots_txt("User-agent: *\nAllow: /shop\nDisallow: /shop/checkout\n")
        assert not robots.is_allowed("https://example.com/shop/checkout/pay")
        assert robots.is_allowed("https://example.com/shop/shoes")

    def test_allow_wins_tie(self) -> None:
        """Test that equally long Allow and Disallow patterns resolve to allow."""
        robots = RobotsConfig(allow_patterns=["/page"], disallow_patterns=["/page"])
        assert robots.is_allowed("https://example.com/page")

    def test_end_anchor_does_not_count_towards_length(self) -> None:
        """Test that "/a$" ties with "/a" rather than outranking it."""
        robots = RobotsConfig(allow_patterns=["/a"], disallow_patterns=["/a$"])
        assert robots.is_allowed("https://example.com/a")

    def test_other_origin_is_not_allowed(self) -> None:
        """Test that rules from one host never admit URLs on another."""
        robots = parse_robots_txt("User-agent: *\nDisallow: /a\n", origin="https://example.com")
        assert not robots.is_allowed("https://other.org/a")
        assert not robots.is_allowed("https://other.org/b")
        assert not robots.is_allowed("http://example.com/b")
        assert robots.is_allowed("https://EXAMPLE.com/b")

    def test_end_anchor(self) -> None:
        """Test that $ anchors the match at the end of the path."""
        robots = RobotsConfig(disallow_patterns=["/*.pdf$", "/exact$"])
        assert not robots.is_allowed("https://example.com/files/report.pdf")
        assert robots.is_allowed("https://example.com/files/report.pdf.html")
        assert not robots.is_allowed("https://example.com/exact")
        assert robots.is_allowed("https://example.com/exact/more")

    def test_query_string_is_matched(self) -> None:
        """Test that query strings are part of the matched path."""
        robots = RobotsConfig(disallow_patterns=["/*?session="])
        assert not robots.is_allowed("https://example.com/page?session=1")
        assert robots.is_allowed("https://example.com/page")

    def test_filter_urls_by_robots(self, robots: RobotsConfig) -> None:
        """Test splitting URLs into allowed and disallowed."""
        allowed, disallowed = filter_urls_by_robots(
            ["https://example.com/a", "https://example.com/checkout/cart"],
            robots,
        )
        assert allowed == ["https://example.com/a"]
        assert disallowed == ["https://example.com/checkout/cart"]


class TestFetchRobots:
    """Tests for fetch_robots."""

    def test_robots_url_uses_origin(self) -> None:
        """Test that robots.txt is looked up at the site origin."""
        assert robots_url_for("https://example.com/shop/index.html") == "https://example.com/robots.txt"

    @pytest.mark.asyncio
    async def test_fetches_and_parses(self, fake_site) -> None:
        """Test a successful fetch."""
        site = fake_site({"https://example.com/robots.txt": ROBOTS_TXT})
        async with site.client() as client:
            robots = await fetch_robots(client, "https://example.com/")
        assert robots.sitemaps[0] == "https://example.com/sitemap.xml"
        assert robots.origin == "https://example.com"
        assert not robots.is_allowed("https://other.org/a")
        assert site.requests == ["https://example.com/robots.txt"]

    @pytest.mark.asyncio
    async def test_missing_robots_fails_by_default(self, fake_site) -> None:
        """Test that a 404 is fatal unless configured otherwise."""
        site = fake_site({})
        async with site.client() as client:
            with pytest.raises(PolicyError) as exc_info:
                await fetch_robots(client, "https://example.com/")
        assert exc_info.value.context["url"] == "https://example.com/robots.txt"
        assert exc_info.value.context["status_code"] == 404
        assert exc_info.value.context["stage"] == "robots"

    @pytest.mark.asyncio
    async def test_missing_robots_can_allow_all(self, fake_site) -> None:
        """Test the permissive policy for a 404."""
        site = fake_site({})
        async with site.client() as client:
            robots = await fetch_robots(client, "https://example.com/", on_missing="allow")
        assert robots.sitemaps == []
        assert robots.is_allowed("https://example.com/anything")
        assert not robots.is_allowed("https://other.org/anything")

    @pytest.mark.asyncio
    async def test_server_error_is_fatal_even_when_allowing_missing(self, fake_site) -> None:
        """Test that only a 404 is treated as a missing file."""
        site = fake_site({"https://example.com/robots.txt": 503})
        async with site.client() as client:
            with pytest.raises(PolicyError):
                await fetch_robots(client, "https://example.com/", on_missing="allow")
