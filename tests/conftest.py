"""Pytest configuration and shared fixtures for sitemaptree tests."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeAlias

import httpx
import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Pure logic tests with no I/O or network")
    config.addinivalue_line("markers", "integration: Tests that drive the pipeline over a mocked HTTP transport")
    config.addinivalue_line("markers", "e2e: End-to-end tests with live network")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """
    Apply default markers to tests without explicit markers.

    Unmarked tests default to unit.
    """
    for item in items:
        marker_names = [m.name for m in item.iter_markers()]
        if any(m in marker_names for m in ("unit", "integration", "e2e")):
            continue
        item.add_marker(pytest.mark.unit)


# Response body, status code, or (status code, body)
Route: TypeAlias = str | bytes | int | tuple[int, str | bytes]


class FakeSite:
    """In-memory site served through httpx.MockTransport.

    Records every requested URL so tests can assert on fetch order and
    refetching. Unknown URLs answer 404.
    """

    def __init__(self, routes: dict[str, Route]):
        self.routes = dict(routes)
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url, 404)
        if isinstance(route, int):
            return httpx.Response(route)
        if isinstance(route, tuple):
            status, body = route
            return httpx.Response(status, content=body if isinstance(body, bytes) else body.encode("utf-8"))
        return httpx.Response(200, content=route if isinstance(route, bytes) else route.encode("utf-8"))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, follow_redirects=True)


@pytest.fixture
def fake_site() -> Callable[[dict[str, Route]], FakeSite]:
    """Factory for FakeSite instances."""
    return FakeSite


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed reference time for recency filtering."""
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def urlset(*urls: str, lastmod: str | None = None, declaration: bool = True) -> str:
    """Build a <urlset> sitemap document."""
    entries = []
    for url in urls:
        lastmod_xml = f"<lastmod>{lastmod}</lastmod>" if lastmod else ""
        entries.append(f"<url><loc>{url}</loc>{lastmod_xml}</url>")
    prologue = '<?xml version="1.0" encoding="UTF-8"?>\n' if declaration else ""
    return (
        f"{prologue}"
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        f"{''.join(entries)}"
        "</urlset>"
    )


def sitemapindex(*urls: str) -> str:
    """Build a <sitemapindex> document."""
    entries = "".join(f"<sitemap><loc>{url}</loc></sitemap>" for url in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        f"{entries}"
        "</sitemapindex>"
    )
