# site_crawler/crawler/sinks.py
"""
Event sinks: where :class:`~site_crawler.crawler.crawler.SiteCrawler` sends its events.

The engine only knows the :class:`EventSink` protocol (``emit`` and ``close``);
each transport (SSE response, worker thread, CLI, tests) plugs in its own sink.
"""
from __future__ import annotations

import asyncio
import inspect
import queue
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

from site_crawler.crawler.models import CrawlEvent

__all__ = [
    "EventSink",
    "ListSink",
    "CallbackSink",
    "QueueSink",
    "ThreadQueueSink",
]


@runtime_checkable
class EventSink(Protocol):
    async def emit(self, event: CrawlEvent) -> None: ...

    async def close(self) -> None: ...


class ListSink:
    """Collects every event in memory."""

    def __init__(self) -> None:
        self.events: List[CrawlEvent] = []
        self.closed = False

    async def emit(self, event: CrawlEvent) -> None:
        self.events.append(event)

    async def close(self) -> None:
        self.closed = True


class CallbackSink:
    """Calls *callback* for every event; coroutine callbacks are awaited."""

    def __init__(self, callback: Callable[[CrawlEvent], Union[None, Awaitable[None]]]) -> None:
        self._callback = callback

    async def emit(self, event: CrawlEvent) -> None:
        result = self._callback(event)
        if inspect.isawaitable(result):
            await result

    async def close(self) -> None:
        return None


_CLOSED = object()


class QueueSink:
    """Bounded :class:`asyncio.Queue` between the engine task and one consumer.

    ``emit`` waits while the queue is full.  Iterate with ``async for`` to
    drain events in emission order; iteration ends once the sink is closed.
    ``terminated`` turns True once a terminal event (final URLs or error) has
    been emitted.
    """

    def __init__(self, maxsize: int = 256) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self._exhausted = False
        self.terminated = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, event: CrawlEvent) -> None:
        if self._closed:
            raise RuntimeError("emit() on a closed QueueSink")
        self.terminated = self.terminated or event.is_terminal
        await self._queue.put(event)

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._queue.put(_CLOSED)

    def __aiter__(self) -> QueueSink:
        return self

    async def __anext__(self) -> CrawlEvent:
        if self._exhausted:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._exhausted = True
            raise StopAsyncIteration
        return item


class ThreadQueueSink:
    """Posts ``event.to_dict()`` messages onto a thread-safe :class:`queue.Queue`.

    ``None`` is posted on close so a reader thread knows the crawl is over.
    ``terminated`` mirrors :attr:`QueueSink.terminated`.
    """

    def __init__(
        self,
        messages: "queue.Queue[Optional[Dict[str, Any]]]",
        on_message: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> None:
        self.messages = messages
        self._on_message = on_message
        self.terminated = False

    async def emit(self, event: CrawlEvent) -> None:
        self.terminated = self.terminated or event.is_terminal
        message = event.to_dict()
        if self._on_message is not None:
            self._on_message(message)
        self.messages.put(message)

    async def close(self) -> None:
        self.messages.put(None)
