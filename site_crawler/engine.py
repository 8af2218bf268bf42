# File: site_crawler/engine.py
"""site_crawler.engine: фасад для CLI и внешних потребителей: запуск обхода и типизированный результат."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from site_crawler.config import CrawlerConfig, load_config
from site_crawler.crawler.crawler import crawl
from site_crawler.crawler.models import CrawlEvent, ErrorEvent, UrlsEvent
from site_crawler.crawler.sinks import CallbackSink
from site_crawler.logger import logger

__all__ = ["CrawlResult", "Engine", "start_crawl"]


@dataclass(slots=True)
class CrawlResult:
    """Итог одного обхода, который передаётся дальше (расчёт цены, извлечение контента)."""

    seed_url: str
    urls: List[str] = field(default_factory=list)
    source: str = "crawl"
    error: Optional[str] = None
    events: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


async def start_crawl(
    seed_url: str,
    config: Optional[CrawlerConfig] = None,
    on_event: Optional[Callable[[CrawlEvent], None]] = None,
) -> CrawlResult:
    """Выполняет обход и собирает события в :class:`CrawlResult`.

    ``on_event`` получает каждое событие по мере появления (например, для
    вывода прогресса в консоль).
    """
    result = CrawlResult(seed_url=seed_url)

    def collect(event: CrawlEvent) -> None:
        result.events += 1
        if isinstance(event, UrlsEvent):
            result.urls = list(event.urls)
        elif isinstance(event, ErrorEvent):
            result.error = event.message
        if on_event is not None:
            on_event(event)

    job = await crawl(seed_url, CallbackSink(collect), config)
    if job is not None:
        result.seed_url = job.seed_url
        result.source = "sitemap" if job.from_sitemap else "crawl"
    return result


class Engine:
    """Фасад для CLI и тестов: загрузка конфига и синхронный запуск обхода."""

    @staticmethod
    def load_config(path: Optional[str]) -> CrawlerConfig:
        """Загружает конфиг из YAML/JSON или использует значения по умолчанию."""
        return load_config(path)

    def __init__(self, config: Optional[CrawlerConfig] = None) -> None:
        self.config = config or CrawlerConfig()

    def start_crawl(
        self,
        seed_url: str,
        on_event: Optional[Callable[[CrawlEvent], None]] = None,
        timeout: Optional[float] = None,
    ) -> CrawlResult:
        """Запускает обход в новом event loop и возвращает результат.

        ``timeout`` ограничивает весь обход; по истечении бросает asyncio.TimeoutError.
        """
        logger.info("Starting crawl of %s", seed_url)
        try:
            return asyncio.run(asyncio.wait_for(start_crawl(seed_url, self.config, on_event), timeout=timeout))
        except asyncio.TimeoutError:
            logger.error("Crawl did not finish within %s seconds", timeout)
            raise
