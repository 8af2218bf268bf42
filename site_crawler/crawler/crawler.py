# site_crawler/crawler/crawler.py
"""
Движок обхода: BFS по одному домену с учётом robots.txt и короткой дорогой через sitemap.xml.

Все события уходят в переданный :class:`~site_crawler.crawler.sinks.EventSink`,
остановка идёт через любой объект с ``is_set()``.
"""
from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Optional, Protocol

from aiohttp import ClientSession

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.fetcher import Fetcher
from site_crawler.crawler.link_extractor import fetch_and_extract_links
from site_crawler.crawler.models import CrawlJob, ErrorEvent, LogEvent, ProgressEvent, UrlsEvent
from site_crawler.crawler.sinks import EventSink
from site_crawler.exceptions import InvalidSeedURL
from site_crawler.logger import LOGGER_NAME
from site_crawler.parser.robots_parser import fetch_robots_policy
from site_crawler.parser.sitemap_parser import fetch_sitemap
from site_crawler.utils import display_path

__all__ = ("CancelSignal", "SiteCrawler", "crawl")


class CancelSignal(Protocol):
    """Любой объект с ``is_set()``: :class:`asyncio.Event` или :class:`threading.Event`."""

    def is_set(self) -> bool: ...


class SiteCrawler:
    """Обход сайта в ширину в пределах одного домена, с robots.txt и sitemap.xml.

    Один экземпляр может выполнять несколько обходов подряд или параллельно:
    всё состояние обхода хранится в :class:`CrawlJob`, который создаёт :meth:`run`.
    """

    def __init__(self, config: Optional[CrawlerConfig] = None, session: Optional[ClientSession] = None) -> None:
        self.config = config or CrawlerConfig()
        self.session = session
        self._owns_session = session is None
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> SiteCrawler:
        if self.session is None:
            self.session = ClientSession(headers={"User-Agent": self.config.user_agent})
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

    async def run(
        self,
        seed_url: str,
        sink: EventSink,
        cancel: Optional[CancelSignal] = None,
    ) -> Optional[CrawlJob]:
        """Обходит сайт от *seed_url*, отправляя события в *sink*.

        Отправляется ровно одно из двух: итоговый ``UrlsEvent(complete=True)``
        или ``ErrorEvent``. Если *cancel* выставлен раньше, обход молча
        останавливается. Возвращает задание или ``None`` для некорректного URL.
        """
        try:
            job = CrawlJob.from_seed(seed_url)
        except InvalidSeedURL as exc:
            self.logger.warning("%s", exc)
            await sink.emit(ErrorEvent("Invalid URL provided"))
            return None
        if not self.session:
            raise RuntimeError("Session not initialized")
        fetcher = Fetcher(self.session, self.config)

        await self._log(sink, f"Starting crawl of {job.base_domain}", logging.INFO)

        await self._log(sink, "Fetching robots.txt...")
        job.disallowed_paths.extend(await fetch_robots_policy(fetcher, job.seed_url, self.config.robots_token))
        if job.disallowed_paths:
            await self._log(sink, f"Respecting {len(job.disallowed_paths)} robots.txt rules")
        else:
            await self._log(sink, "No robots.txt rules apply (using default rules)")
        if self._cancelled(cancel):
            return job

        await self._log(sink, "Checking for sitemap.xml...")
        sitemap_urls = await fetch_sitemap(fetcher, job.seed_url, job.base_domain, job.disallowed_paths)
        if self._cancelled(cancel):
            return job

        if sitemap_urls:
            await self._log(sink, f"Found sitemap.xml – adding {len(sitemap_urls)} URLs")
            job.from_sitemap = True
            for url in sitemap_urls:
                job.discover(url, 0)
            await sink.emit(UrlsEvent(job.snapshot(), complete=True))
            await self._log(
                sink, f"Crawling complete: {len(job.discovered)} URLs found from sitemap", logging.INFO
            )
            return job

        await self._log(sink, "No sitemap found, crawling manually...")
        if not await self._crawl(job, fetcher, sink, cancel):
            return job

        await sink.emit(UrlsEvent(job.snapshot(), complete=True))
        await self._log(sink, f"Crawling complete: {len(job.discovered)} URLs found", logging.INFO)
        return job

    async def _crawl(
        self,
        job: CrawlJob,
        fetcher: Fetcher,
        sink: EventSink,
        cancel: Optional[CancelSignal],
    ) -> bool:
        """Цикл BFS; False означает, что обход отменён."""
        cfg = self.config
        job.discover(job.seed_url, 0)
        job.enqueue(job.seed_url, 0)

        processed = 0
        started = time.monotonic()

        while job.queue and not job.budget_exhausted(cfg.max_urls):
            if self._cancelled(cancel):
                self.logger.info("Crawl of %s cancelled after %d pages", job.base_domain, processed)
                return False

            url, depth = job.queue.popleft()
            if url in job.visited or depth > cfg.max_depth:
                continue

            job.visited.add(url)
            processed += 1
            await self._log(sink, f"Crawling {display_path(url)}")

            await asyncio.sleep(cfg.request_delay)
            links = await fetch_and_extract_links(
                fetcher, url, job.base_domain, job.disallowed_paths, job.discovered
            )

            for link in links:
                if job.budget_exhausted(cfg.max_urls):
                    break
                if not job.discover(link, depth + 1):
                    continue
                await self._log(sink, f"Discovered → {display_path(link)}")
                if depth < cfg.max_depth:
                    job.enqueue(link, depth + 1)
                await sink.emit(UrlsEvent(job.snapshot(), complete=False))

            if processed % cfg.progress_every == 0:
                eta = self.estimate_eta(len(job.queue), processed, time.monotonic() - started)
                await sink.emit(ProgressEvent(len(job.discovered), len(job.visited), len(job.queue), eta))

        return True

    @staticmethod
    def estimate_eta(queued: int, processed: int, elapsed: float) -> int:
        """Оставшиеся секунды при текущей скорости, с округлением вверх; 0, если оценить нельзя."""
        if queued <= 0 or processed <= 0 or elapsed <= 0:
            return 0
        rate = processed / elapsed
        return math.ceil(queued / rate)

    async def _log(self, sink: EventSink, message: str, level: int = logging.DEBUG) -> None:
        self.logger.log(level, message)
        await sink.emit(LogEvent(message))

    @staticmethod
    def _cancelled(cancel: Optional[CancelSignal]) -> bool:
        return cancel is not None and cancel.is_set()


async def crawl(
    seed_url: str,
    sink: EventSink,
    config: Optional[CrawlerConfig] = None,
    cancel: Optional[CancelSignal] = None,
) -> Optional[CrawlJob]:
    """Один обход с собственной HTTP-сессией краулера."""
    async with SiteCrawler(config) as crawler:
        return await crawler.run(seed_url, sink, cancel)
