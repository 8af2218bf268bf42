# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Dict, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web

from site_crawler.config import CrawlerConfig
from site_crawler.logger import configure

#: (body, content_type, status, delay seconds)
Route = Tuple[str, str, int, float]
RouteSpec = Union[str, Route]


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


@pytest.fixture(autouse=True)
def _reset_logger():
    """CLI tests swap the logger's stream; restore a quiet default after every test."""
    yield
    configure(level="WARNING")


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """Crawler settings tuned for local test servers."""
    return CrawlerConfig(
        request_delay=0.0,
        page_timeout=2.0,
        robots_timeout=2.0,
        progress_every=1,
        user_agent="TestAgent/1.0",
    )


def html(*hrefs: str, body: str = "") -> str:
    """Build a tiny HTML page with one anchor per href."""
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><head><title>t</title></head><body>{body}{anchors}</body></html>"


@dataclass
class LiveSite:
    """A running aiohttp site plus per-path hit counters."""

    base: str
    hits: Counter = field(default_factory=Counter)

    def url(self, path: str) -> str:
        return f"{self.base}{path}"


AppStarter = Callable[[web.Application], Awaitable[str]]
SiteFactory = Callable[[Dict[str, RouteSpec]], Awaitable[LiveSite]]


@pytest_asyncio.fixture
async def start_app(unused_tcp_port_factory) -> AsyncIterator[AppStarter]:
    """Start any aiohttp application on a free port and return its base URL."""
    runners: list[web.AppRunner] = []

    async def starter(app: web.Application) -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        await web.TCPSite(runner, "127.0.0.1", port).start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield starter

    for runner in runners:
        await runner.cleanup()


@pytest_asyncio.fixture
async def make_site(start_app) -> SiteFactory:
    """Factory fixture: ``site = await make_site({"/": html("/a"), ...})``.

    A plain string is served as ``text/html``; a tuple gives full control.
    Route bodies may contain ``{base}`` which is replaced by the site's base URL.
    Unknown paths (robots.txt, sitemap.xml included) answer 404.
    """
    async def factory(routes: Dict[str, RouteSpec]) -> LiveSite:
        site = LiveSite(base="")
        app = web.Application()

        def make_handler(path: str, route: RouteSpec):
            if isinstance(route, str):
                route = (route, "text/html", 200, 0.0)
            body, content_type, status, delay = route

            async def handler(_request: web.Request) -> web.Response:
                site.hits[path] += 1
                if delay:
                    await asyncio.sleep(delay)
                return web.Response(
                    text=body.replace("{base}", site.base),
                    content_type=content_type,
                    status=status,
                )

            return handler

        for path, route in routes.items():
            app.router.add_get(path, make_handler(path, route))

        site.base = await start_app(app)
        return site

    return factory


def sitemap_xml(*locs: str) -> str:
    entries = "".join(f"<url><loc>{loc}</loc></url>" for loc in locs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'
    )


def robots(text: str) -> Route:
    return (text, "text/plain", 200, 0.0)
