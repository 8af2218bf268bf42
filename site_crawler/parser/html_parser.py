"""HTML parsing utilities for SiteCrawler.

Only anchors matter to the crawler: :func:`extract_hrefs` returns the raw
``href`` values of ``<a>`` tags in document order.  Resolution and filtering
happen in :mod:`site_crawler.crawler.link_extractor`.
"""
from __future__ import annotations

from collections.abc import Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("extract_hrefs",)


def extract_hrefs(soup: BeautifulSoup) -> list[str]:
    """Return non-empty ``href`` values of anchor elements in document order."""
    hrefs: list[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if isinstance(href, str) and href.strip():
            hrefs.append(href.strip())
    return hrefs
