# File: site_crawler/worker.py
"""site_crawler.worker: краулер в отдельном потоке с обменом сообщениями.

Вызывающий код отправляет одну команду ``{"type": "start", "url": ...}`` и
читает события (словари в формате ``CrawlEvent.to_dict()``) из очереди
:attr:`CrawlWorker.messages` или получает их через callback ``on_message``.
Конец потока событий помечается ``None`` в очереди.
"""

from __future__ import annotations

import asyncio
import queue
import threading
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.crawler import crawl
from site_crawler.crawler.models import ErrorEvent
from site_crawler.crawler.sinks import ThreadQueueSink
from site_crawler.logger import logger

__all__ = ["CrawlWorker"]

Message = Dict[str, Any]


class CrawlWorker:
    """Запускает один обход на выделенном потоке со своим event loop."""

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        on_message: Optional[Callable[[Message], None]] = None,
    ) -> None:
        self.config = config or CrawlerConfig()
        self.messages: "queue.Queue[Optional[Message]]" = queue.Queue()
        self._on_message = on_message
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Commands                                                           #
    # ------------------------------------------------------------------ #

    def post_message(self, message: Mapping[str, Any]) -> None:
        """Принимает команду; поддерживается только ``start``."""
        kind = message.get("type")
        if kind != "start":
            raise ValueError(f"Unknown worker command: {kind!r}")
        self.start(str(message.get("url") or ""))

    def start(self, url: str) -> None:
        """Начинает обход *url* в фоне. Повторный запуск запрещён."""
        if self._thread is not None:
            raise RuntimeError("CrawlWorker can only be started once")
        self._thread = threading.Thread(target=self._run, args=(url,), name="crawl-worker", daemon=True)
        self._thread.start()

    def terminate(self) -> None:
        """Останавливает обход как можно быстрее; события после этого не гарантируются."""
        self._stop.set()
        with self._lock:
            if self._loop is not None and self._task is not None:
                self._loop.call_soon_threadsafe(self._task.cancel)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def iter_messages(self, timeout: Optional[float] = None) -> Iterator[Message]:
        """Выдаёт сообщения по мере поступления до конца обхода.

        ``timeout`` ограничивает ожидание одного сообщения (``queue.Empty``).
        """
        while True:
            message = self.messages.get(timeout=timeout)
            if message is None:
                return
            yield message

    # ------------------------------------------------------------------ #
    # Thread body                                                        #
    # ------------------------------------------------------------------ #

    def _run(self, url: str) -> None:
        sink = ThreadQueueSink(self.messages, self._on_message)
        try:
            asyncio.run(self._main(url, sink))
        finally:
            with self._lock:
                self._loop = None
                self._task = None

    async def _main(self, url: str, sink: ThreadQueueSink) -> None:
        task = asyncio.create_task(crawl(url, sink, self.config, cancel=self._stop))
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._task = task
        if self._stop.is_set():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Crawl worker for %s terminated", url)
        except Exception as exc:
            logger.exception("Crawl worker for %s failed", url)
            if not sink.terminated:
                await sink.emit(ErrorEvent(str(exc) or exc.__class__.__name__))
        finally:
            await sink.close()
