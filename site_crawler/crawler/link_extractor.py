# site_crawler/crawler/link_extractor.py
"""
Page fetching plus link extraction: the step the engine runs for every URL it visits.
"""
from __future__ import annotations

from typing import Collection, List, Sequence

from bs4 import BeautifulSoup

from site_crawler.crawler.fetcher import Fetcher
from site_crawler.parser.html_parser import extract_hrefs
from site_crawler.utils import is_same_domain, normalize_url, should_skip


def filter_links(
    hrefs: Sequence[str],
    page_url: str,
    base_domain: str,
    disallowed_paths: Sequence[str],
    discovered: Collection[str],
) -> List[str]:
    """
    Turn raw hrefs into crawlable links.

    Each href is normalized against *page_url*, must stay on *base_domain*,
    pass the skip policy and be absent from *discovered*.  Order follows the
    document; duplicates within the page are dropped.
    """
    links: List[str] = []
    seen: set[str] = set()
    for href in hrefs:
        url = normalize_url(href, page_url)
        if url is None or url in seen or url in discovered:
            continue
        if not is_same_domain(url, base_domain) or should_skip(url, disallowed_paths):
            continue
        seen.add(url)
        links.append(url)
    return links


def extract_links(
    html: str,
    page_url: str,
    base_domain: str,
    disallowed_paths: Sequence[str] = (),
    discovered: Collection[str] = (),
) -> List[str]:
    """Parse *html* and return the new same-domain links it contains."""
    soup = BeautifulSoup(html, "html.parser")
    return filter_links(extract_hrefs(soup), page_url, base_domain, disallowed_paths, discovered)


async def fetch_and_extract_links(
    fetcher: Fetcher,
    url: str,
    base_domain: str,
    disallowed_paths: Sequence[str],
    discovered: Collection[str],
) -> List[str]:
    """
    Fetch *url* and return its newly found links.

    A failed fetch (timeout, network error, non-2xx, non-HTML) yields ``[]``.
    Relative links resolve against the requested *url*, not the redirect
    target, so a seed that redirects to another host keeps its own domain.
    """
    page = await fetcher.fetch_page(url)
    if page is None:
        return []
    return extract_links(page.content, url, base_domain, disallowed_paths, discovered)


__all__ = ["filter_links", "extract_links", "fetch_and_extract_links"]
