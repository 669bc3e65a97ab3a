"""Allow running as ``python -m sitemaptree``."""

from sitemaptree.cli import app

if __name__ == "__main__":
    app()
