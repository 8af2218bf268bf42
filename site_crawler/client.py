# File: site_crawler/client.py
"""site_crawler.client: клиент для SSE-эндпоинта ``/crawl-website``."""

from __future__ import annotations

import codecs
import inspect
import json
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Union

from aiohttp import ClientSession, ClientTimeout

from site_crawler.exceptions import CrawlError
from site_crawler.logger import logger

__all__ = ["crawl_website", "iter_sse_data"]

ProgressCallback = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]


def iter_sse_data(buffer: str) -> Iterator[str]:
    """Возвращает payload всех строк ``data: `` из законченных SSE-кадров в *buffer*."""
    for frame in buffer.split("\n\n"):
        for line in frame.splitlines():
            if line.startswith("data: "):
                yield line[len("data: "):]


class _FrameBuffer:
    """Accumulates decoded chunks and hands out complete ``data:`` payloads."""

    def __init__(self) -> None:
        self._pending = ""

    def feed(self, chunk: str) -> List[str]:
        self._pending += chunk.replace("\r\n", "\n")
        complete, sep, rest = self._pending.rpartition("\n\n")
        if not sep:
            return []
        self._pending = rest
        return list(iter_sse_data(complete))

    def flush(self) -> List[str]:
        tail, self._pending = self._pending, ""
        return list(iter_sse_data(tail))


async def crawl_website(
    api_url: str,
    start_url: str,
    on_progress: Optional[ProgressCallback] = None,
    *,
    session: Optional[ClientSession] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> List[str]:
    """Запускает удалённый обход и возвращает последний полученный список URL.

    Каждое событие передаётся в ``on_progress`` как словарь. Ошибка запуска
    (не 2xx) или событие ``error`` приводят к :class:`CrawlError`.
    """
    own_session = session is None
    http = session or ClientSession(timeout=ClientTimeout(total=timeout))
    final_urls: List[str] = []
    try:
        async with http.post(
            api_url,
            json={"url": start_url},
            headers={"Accept": "text/event-stream", **(headers or {})},
        ) as resp:
            if not 200 <= resp.status < 300:
                raise CrawlError(f"Failed to start crawl: HTTP {resp.status}")

            frames = _FrameBuffer()
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            async for chunk in resp.content.iter_any():
                for payload in frames.feed(decoder.decode(chunk)):
                    final_urls = await _dispatch(payload, on_progress, final_urls)
            for payload in frames.flush():
                final_urls = await _dispatch(payload, on_progress, final_urls)
    finally:
        if own_session:
            await http.close()
    return final_urls


async def _dispatch(payload: str, on_progress: Optional[ProgressCallback], urls: List[str]) -> List[str]:
    try:
        event = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning("Skipping malformed SSE payload: %.80s", payload)
        return urls
    if not isinstance(event, dict):
        return urls

    if on_progress is not None:
        result = on_progress(event)
        if inspect.isawaitable(result):
            await result

    kind = event.get("type")
    if kind == "error":
        raise CrawlError(event.get("message") or "Crawl failed")
    if kind == "urls" and isinstance(event.get("urls"), list):
        return list(event["urls"])
    return urls
