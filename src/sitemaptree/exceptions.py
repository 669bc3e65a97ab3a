"""Custom exceptions for sitemaptree with context support."""

import uuid
from typing import Any


def generate_correlation_id() -> str:
    """
    Generate an 8-character UUID-based correlation ID.

    Returns:
        8-character correlation ID string.
    """
    return str(uuid.uuid4())[:8]


class SitemapTreeError(Exception):
    """Base exception for sitemaptree with context and correlation ID support."""

    def __init__(
        self,
        message: str,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise exception with message, correlation ID, and context.

        Args:
            message: Error message.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        self.message = message
        self.correlation_id = correlation_id or generate_correlation_id()
        self.context = context or {}
        super().__init__(f"{message} [correlation_id={self.correlation_id}]")


class ConfigurationError(SitemapTreeError):
    """Raised when configuration loading or validation fails."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise configuration error with setting context.

        Args:
            message: Error message.
            setting: Optional name of the offending setting.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        context.setdefault("stage", "config")
        if setting is not None:
            context["setting"] = setting
        super().__init__(message, correlation_id=correlation_id, context=context)


class FetchError(SitemapTreeError):
    """Raised when a URL cannot be fetched or answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise fetch error with URL and status context.

        Args:
            message: Error message.
            url: URL that failed.
            status_code: HTTP status, or None for transport failures.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        context["url"] = url
        if status_code is not None:
            context["status_code"] = status_code
        self.url = url
        self.status_code = status_code
        super().__init__(message, correlation_id=correlation_id, context=context)


class ParseError(SitemapTreeError):
    """Raised when sitemap content is not well-formed XML."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if context is None:
            context = {}
        context.setdefault("stage", "sitemap")
        if url is not None:
            context["url"] = url
        self.url = url
        super().__init__(message, correlation_id=correlation_id, context=context)


class PolicyError(SitemapTreeError):
    """Raised when robots.txt is missing or cannot be retrieved."""

    def __init__(
        self,
        message: str,
        url: str,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if context is None:
            context = {}
        context.setdefault("stage", "robots")
        context["url"] = url
        self.url = url
        super().__init__(message, correlation_id=correlation_id, context=context)


class SitemapCycleError(SitemapTreeError):
    """Raised when a sitemap index refers back to one of its own ancestors."""

    def __init__(
        self,
        message: str,
        url: str,
        chain: list[str],
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise cycle error with the offending ancestor chain.

        Args:
            message: Error message.
            url: Sitemap URL that was revisited.
            chain: Ancestor sitemap URLs, outermost first.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        context.setdefault("stage", "sitemap")
        context["url"] = url
        context["chain"] = list(chain)
        self.url = url
        self.chain = list(chain)
        super().__init__(message, correlation_id=correlation_id, context=context)


class SitemapDepthError(SitemapTreeError):
    """Raised when sitemap indexes nest deeper than the configured bound."""

    def __init__(
        self,
        message: str,
        url: str,
        depth: int,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if context is None:
            context = {}
        context.setdefault("stage", "sitemap")
        context["url"] = url
        context["depth"] = depth
        self.url = url
        self.depth = depth
        super().__init__(message, correlation_id=correlation_id, context=context)
