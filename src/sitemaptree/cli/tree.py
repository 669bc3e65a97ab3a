"""Sitemap discovery and tree rendering command."""

import click

from sitemaptree.cli._common import app, configure_logging, format_error


@app.command("tree", help="Discover a site's URLs from its sitemaps and print them as a tree.")
@click.argument("site_url", required=False, envvar="SITEMAPTREE_SITE_URL")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="HTTP timeout in seconds (default: 30). Also reads SITEMAPTREE_TIMEOUT env.",
)
@click.option(
    "--max-depth",
    type=int,
    default=None,
    help="Maximum nesting of sitemap indexes (default: 10). Also reads SITEMAPTREE_MAX_DEPTH env.",
)
@click.option(
    "--max-age-years",
    type=int,
    default=None,
    help="Drop entries older than this when every entry has lastmod (default: 2). "
    "Also reads SITEMAPTREE_MAX_AGE_YEARS env.",
)
@click.option(
    "--missing-robots",
    type=click.Choice(["fail", "allow"], case_sensitive=False),
    default=None,
    help="What to do when robots.txt returns 404 (default: fail). Also reads SITEMAPTREE_MISSING_ROBOTS env.",
)
@click.option(
    "--index-detection",
    type=click.Choice(["root", "heuristic"], case_sensitive=False),
    default=None,
    help="Tell sitemap indexes apart by root element (default) or by the 'sitemap' URL heuristic. "
    "Also reads SITEMAPTREE_INDEX_DETECTION env.",
)
@click.option(
    "--user-agent",
    type=str,
    default=None,
    help="User-Agent header for requests. Also reads SITEMAPTREE_USER_AGENT env.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def tree_cmd(
    site_url: str | None,
    timeout: float | None,
    max_depth: int | None,
    max_age_years: int | None,
    missing_robots: str | None,
    index_detection: str | None,
    user_agent: str | None,
    verbose: bool,
) -> None:
    """Discover and print a site's URL tree.

    Examples:
        sitemaptree tree https://example.com/
        SITEMAPTREE_SITE_URL=https://example.com/ sitemaptree tree --max-age-years 1
    """
    import asyncio

    from sitemaptree.config import load_discovery_config
    from sitemaptree.exceptions import SitemapTreeError
    from sitemaptree.services.discover import DiscoveryService
    from sitemaptree.tree import format_tree

    configure_logging(verbose=verbose)

    try:
        config = load_discovery_config(
            site_url=site_url,
            timeout=timeout,
            max_depth=max_depth,
            max_age_years=max_age_years,
            missing_robots=missing_robots.lower() if missing_robots else None,
            index_detection=index_detection.lower() if index_detection else None,
            user_agent=user_agent,
        )
        service = DiscoveryService(config)
        result = asyncio.run(service.discover())
    except SitemapTreeError as e:
        click.echo(format_error(e), err=True)
        raise SystemExit(1) from e

    click.echo(f"Discovered {result.discovered} sitemap entries")
    click.echo(f"{result.allowed} entries allowed by robots.txt")
    if result.recency_applied and result.cutoff is not None:
        click.echo(f"{result.relevant} entries modified since {result.cutoff.date().isoformat()}")
    click.echo(f"Found {len(result.unique_urls)} unique URLs")
    click.echo(format_tree(result.tree, label=config.origin), nl=False)
