# site_crawler/crawler/models.py
"""
Data models for the SiteCrawler engine: fetched pages, the per-run crawl state
and the events streamed to whoever started the crawl.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, ClassVar, Deque, Dict, List, Set, Tuple, Union

from site_crawler.exceptions import InvalidSeedURL
from site_crawler.utils import ensure_scheme, extract_domain, is_valid_seed, normalize_url


@dataclass(slots=True)
class PageData:
    """Holds the final URL (after redirects) and the body of a fetched resource.

    ``content`` is decoded text, or raw bytes when fetched with ``fetch_bytes``.
    """

    url: str
    content: Union[str, bytes]


# --------------------------------------------------------------------------- #
# Events                                                                      #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class LogEvent:
    type: ClassVar[str] = "log"

    message: str

    @property
    def is_terminal(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message}


@dataclass(frozen=True, slots=True)
class UrlsEvent:
    """Snapshot of every URL discovered so far; ``complete`` marks the final one."""

    type: ClassVar[str] = "urls"

    urls: Tuple[str, ...]
    complete: bool

    @property
    def is_terminal(self) -> bool:
        return self.complete

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "urls": list(self.urls), "complete": self.complete}


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    type: ClassVar[str] = "progress"

    discovered: int
    visited: int
    queued: int
    eta: int

    @property
    def is_terminal(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "discovered": self.discovered,
            "visited": self.visited,
            "queued": self.queued,
            "eta": self.eta,
        }


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    type: ClassVar[str] = "error"

    message: str

    @property
    def is_terminal(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message}


CrawlEvent = Union[LogEvent, UrlsEvent, ProgressEvent, ErrorEvent]


# --------------------------------------------------------------------------- #
# Crawl state                                                                 #
# --------------------------------------------------------------------------- #


@dataclass
class CrawlJob:
    """Mutable state of one crawl run; created per invocation and never reused.

    ``discovered`` maps each known URL to the depth it was first found at and
    keeps insertion order, so snapshots list URLs in discovery order.
    """

    seed_url: str
    base_domain: str
    disallowed_paths: List[str] = field(default_factory=list)
    discovered: Dict[str, int] = field(default_factory=dict)
    visited: Set[str] = field(default_factory=set)
    queue: Deque[Tuple[str, int]] = field(default_factory=deque)
    from_sitemap: bool = False

    @classmethod
    def from_seed(cls, raw_url: str) -> CrawlJob:
        """Build a job from user input, adding ``https://`` when the scheme is missing.

        Raises :class:`InvalidSeedURL` when no usable http(s) host can be found.
        """
        if not isinstance(raw_url, str) or not raw_url.strip():
            raise InvalidSeedURL(str(raw_url))
        absolute = ensure_scheme(raw_url)
        if not is_valid_seed(absolute):
            raise InvalidSeedURL(raw_url)
        seed = normalize_url(absolute, absolute)
        if seed is None:
            raise InvalidSeedURL(raw_url)
        return cls(seed_url=seed, base_domain=extract_domain(seed))

    def discover(self, url: str, depth: int) -> bool:
        """Record *url* as known; returns False when it already was."""
        if url in self.discovered:
            return False
        self.discovered[url] = depth
        return True

    def enqueue(self, url: str, depth: int) -> None:
        self.queue.append((url, depth))

    def snapshot(self) -> Tuple[str, ...]:
        return tuple(self.discovered)

    def budget_exhausted(self, max_urls: int) -> bool:
        return len(self.discovered) >= max_urls


__all__ = [
    "PageData",
    "LogEvent",
    "UrlsEvent",
    "ProgressEvent",
    "ErrorEvent",
    "CrawlEvent",
    "CrawlJob",
]
