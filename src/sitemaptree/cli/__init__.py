"""Command-line interface for sitemaptree.

Commands are organized into modules by functionality:

- tree: Sitemap discovery and path tree rendering
"""

# Import all command modules to register them with the app
from sitemaptree.cli import tree  # noqa: F401
from sitemaptree.cli._common import app

__all__ = ["app"]
