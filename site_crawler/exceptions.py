"""Exception hierarchy for SiteCrawler."""
from __future__ import annotations


class CrawlerError(Exception):
    """Base class for all crawler errors."""


class InvalidSeedURL(CrawlerError, ValueError):
    """The seed URL cannot be turned into an absolute http(s) URL with a host."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL provided: {url!r}")
        self.url = url


class CrawlError(CrawlerError):
    """A remote crawl failed to start or reported an ``error`` event."""


__all__ = ["CrawlerError", "InvalidSeedURL", "CrawlError"]
