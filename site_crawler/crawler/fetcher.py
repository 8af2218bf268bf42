# site_crawler/crawler/fetcher.py
"""
Fetcher module: bounded-timeout HTTP GETs that never raise on network trouble.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.models import PageData
from site_crawler.logger import logger


class Fetcher:
    """Wraps a shared :class:`aiohttp.ClientSession` with the crawler's timeouts.

    Every failure mode (non-2xx status, timeout, connection error, undecodable
    body) collapses to ``None`` so one unreachable resource never aborts a crawl.
    """

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config

    async def fetch_text(self, url: str, *, accept: str, timeout: Optional[float] = None) -> Optional[str]:
        """GET *url* and return the decoded body on a 2xx response."""
        page = await self._get(url, accept=accept, timeout=timeout or self.config.page_timeout)
        return None if page is None else page.content

    async def fetch_bytes(self, url: str, *, accept: str, timeout: Optional[float] = None) -> Optional[bytes]:
        """GET *url* and return the raw body, leaving decoding to the caller (XML parsers)."""
        page = await self._get(url, accept=accept, timeout=timeout or self.config.page_timeout, binary=True)
        return None if page is None else page.content

    async def fetch_page(self, url: str) -> Optional[PageData]:
        """GET an HTML page; anything that is not ``text/html`` is ignored."""
        return await self._get(url, accept="text/html", timeout=self.config.page_timeout, mime="text/html")

    async def _get(
        self,
        url: str,
        *,
        accept: str,
        timeout: float,
        mime: Optional[str] = None,
        binary: bool = False,
    ) -> Optional[PageData]:
        try:
            async with self.session.get(
                url,
                headers={"Accept": accept},
                timeout=ClientTimeout(total=timeout),
                raise_for_status=False,
            ) as resp:
                if not 200 <= resp.status < 300:
                    logger.debug("GET %s -> HTTP %s", url, resp.status)
                    return None
                ctype = resp.headers.get("Content-Type", "").lower()
                if mime is not None and mime not in ctype:
                    logger.debug("GET %s -> skipped content type %r", url, ctype)
                    return None
                body = await resp.read() if binary else await resp.text(errors="replace")
                return PageData(url=str(resp.url), content=body)
        except asyncio.TimeoutError:
            logger.debug("GET %s -> timed out after %.1f s", url, timeout)
            return None
        except (ClientError, LookupError, ValueError) as exc:
            # LookupError: unknown charset in Content-Type; ValueError: malformed URL
            logger.debug("GET %s -> %s", url, exc)
            return None


__all__ = ["Fetcher"]
