"""HTTP transport for robots.txt and sitemap documents."""

import gzip
import logging
import zlib

import httpx

from sitemaptree.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from sitemaptree.exceptions import FetchError

LOGGER = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


def create_client(
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client shared by one discovery run.

    Args:
        timeout: Per-request timeout in seconds.
        user_agent: Value of the User-Agent header.
        transport: Optional transport override (tests use httpx.MockTransport).

    Returns:
        Configured httpx.AsyncClient. The caller owns and closes it.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": user_agent},
        transport=transport,
    )


async def fetch_text(client: httpx.AsyncClient, url: str) -> str:
    """
    GET a URL and return its body as text.

    Gzipped bodies (".gz" sitemaps served without content-encoding) are
    decompressed before decoding.

    Args:
        client: HTTP client for the current run.
        url: Absolute URL to fetch.

    Returns:
        Decoded response body.

    Raises:
        FetchError: On transport failure or any non-2xx response.
    """
    LOGGER.debug("Fetching %s", url)
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise FetchError(f"Failed to fetch {url}: {e}", url=url) from e

    if not response.is_success:
        raise FetchError(
            f"Failed to fetch {url}: HTTP {response.status_code} {response.reason_phrase}".rstrip(),
            url=url,
            status_code=response.status_code,
        )

    content = response.content
    if content.startswith(GZIP_MAGIC):
        try:
            content = gzip.decompress(content)
        except (gzip.BadGzipFile, EOFError, zlib.error) as e:
            raise FetchError(f"Corrupt gzip payload from {url}: {e}", url=url) from e
        return content.decode(response.encoding or "utf-8", errors="replace")

    return response.text
