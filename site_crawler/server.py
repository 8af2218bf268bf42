# File: site_crawler/server.py
"""site_crawler.server: HTTP-эндпоинт, отдающий события обхода как server-sent events.

``POST /crawl-website`` с телом ``{"url": "..."}`` открывает поток
``text/event-stream``; каждое событие приходит кадром ``data: <json>\\n\\n``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from aiohttp import web

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.models import CrawlEvent, ErrorEvent
from site_crawler.crawler.stream import CrawlStream
from site_crawler.logger import logger

__all__ = ["CRAWL_PATH", "CONFIG_KEY", "create_app", "encode_sse", "run_server"]

CRAWL_PATH = "/crawl-website"
CONFIG_KEY: web.AppKey[CrawlerConfig] = web.AppKey("config", CrawlerConfig)

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}


def encode_sse(event: CrawlEvent) -> bytes:
    """Сериализует событие в один SSE-кадр."""
    payload = json.dumps(event.to_dict(), ensure_ascii=False)
    return f"data: {payload}\n\n".encode("utf-8")


def _json_error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status, headers=CORS_HEADERS)


async def _read_seed_url(request: web.Request) -> Optional[str]:
    try:
        body: Any = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    url = body.get("url")
    if not isinstance(url, str) or not url.strip():
        return None
    return url


async def handle_preflight(request: web.Request) -> web.Response:
    return web.Response(status=200, headers=CORS_HEADERS)


async def handle_crawl(request: web.Request) -> web.StreamResponse:
    """Запускает обход и транслирует его события клиенту до конца или до отключения."""
    config = request.app[CONFIG_KEY]
    try:
        url = await _read_seed_url(request)
        if url is None:
            return _json_error("URL is required", 400)

        response = web.StreamResponse(
            status=200,
            headers={
                **CORS_HEADERS,
                "Content-Type": "text/event-stream",
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )
        await response.prepare(request)
    except Exception as exc:
        logger.exception("Failed to start crawl stream")
        return _json_error(str(exc) or exc.__class__.__name__, 500)

    logger.info("SSE crawl of %s for %s", url, request.remote)
    terminal_sent = False
    try:
        async with CrawlStream(url, config) as stream:
            async for event in stream:
                await response.write(encode_sse(event))
                terminal_sent = terminal_sent or event.is_terminal
    except ConnectionResetError:
        logger.info("Client disconnected, crawl of %s stopped", url)
        return response
    except Exception as exc:
        logger.exception("Crawl stream for %s failed", url)
        if not terminal_sent:
            await response.write(encode_sse(ErrorEvent(str(exc) or exc.__class__.__name__)))

    await response.write_eof()
    return response


def create_app(config: Optional[CrawlerConfig] = None) -> web.Application:
    """Собирает aiohttp-приложение с эндпоинтом обхода."""
    app = web.Application()
    app[CONFIG_KEY] = config or CrawlerConfig()
    app.router.add_post(CRAWL_PATH, handle_crawl)
    app.router.add_route("OPTIONS", CRAWL_PATH, handle_preflight)
    return app


def run_server(config: Optional[CrawlerConfig] = None, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Блокирующий запуск сервера (используется командой ``serve``)."""
    cfg = config or CrawlerConfig()
    web.run_app(create_app(cfg), host=host or cfg.host, port=port if port is not None else cfg.port, print=None)
