# site_crawler/crawler/stream.py
"""
In-process streaming: run the engine in its own task and read its events as they come.

Usage::

    async with CrawlStream("https://example.com", config) as stream:
        async for event in stream:
            print(event.to_dict())

Leaving the ``async with`` block early (consumer gone, client disconnect)
cancels the crawl task.  An engine failure is reported as an ``ErrorEvent``
unless a terminal event was already sent.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

from aiohttp import ClientSession

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.crawler import SiteCrawler
from site_crawler.crawler.models import CrawlEvent, ErrorEvent
from site_crawler.crawler.sinks import QueueSink
from site_crawler.logger import logger

__all__ = ["CrawlStream"]


class CrawlStream:
    """Async iterator over the events of one crawl running in a background task."""

    def __init__(
        self,
        seed_url: str,
        config: Optional[CrawlerConfig] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.seed_url = seed_url
        self.config = config or CrawlerConfig()
        self._session = session
        self._sink = QueueSink(maxsize=self.config.event_buffer)
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None

    async def __aenter__(self) -> CrawlStream:
        self._task = asyncio.create_task(self._drive(), name=f"crawl:{self.seed_url}")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cancel()

    def __aiter__(self) -> CrawlStream:
        return self

    async def __anext__(self) -> CrawlEvent:
        if self._task is None:
            raise RuntimeError("CrawlStream must be entered with 'async with' first")
        return await self._sink.__anext__()

    async def cancel(self) -> None:
        """Stop the crawl (if still running) and wait for its task to finish."""
        self._stop.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _drive(self) -> None:
        try:
            async with SiteCrawler(self.config, session=self._session) as crawler:
                await crawler.run(self.seed_url, self._sink, cancel=self._stop)
        except Exception as exc:
            logger.exception("Crawl of %s failed", self.seed_url)
            if not self._sink.terminated:
                await self._sink.emit(ErrorEvent(str(exc) or exc.__class__.__name__))
        finally:
            if not self._stop.is_set():
                await self._sink.close()
