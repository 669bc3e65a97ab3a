"""Services for sitemaptree."""

from sitemaptree.services.discover import DiscoveryService

__all__ = ["DiscoveryService"]
