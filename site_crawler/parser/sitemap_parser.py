# File: site_crawler/parser/sitemap_parser.py
"""site_crawler.parser.sitemap_parser: Модуль для загрузки sitemap.xml и извлечения URL."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence, Union

from lxml import etree

from site_crawler.logger import logger
from site_crawler.parser.robots_parser import origin_url
from site_crawler.utils import is_same_domain, normalize_url, remove_duplicates, should_skip

if TYPE_CHECKING:
    from site_crawler.crawler.fetcher import Fetcher

__all__ = ["fetch_sitemap", "parse_sitemap"]


def parse_sitemap(xml_content: Union[str, bytes]) -> List[str]:
    """Разбирает XML content sitemap и возвращает список URL из тегов <loc>.

    Args:
        xml_content: содержимое sitemap.xml. Байты декодирует lxml по
            объявлению ``encoding`` в XML (по умолчанию UTF-8); строка
            кодируется в UTF-8.

    Returns:
        Список URL, найденных в <loc> тегах (пустой, если XML не разобрать).

    Пример:
    ```python
    from site_crawler.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', 'rb') as f:
        content = f.read()
    urls = parse_sitemap(content)
    print(urls)
    ```
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    if not xml_content.strip():
        return []
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except etree.XMLSyntaxError:
        return []
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]


async def fetch_sitemap(
    fetcher: Fetcher,
    base_url: str,
    base_domain: str,
    disallowed_paths: Sequence[str] = (),
) -> List[str]:
    """Загружает /sitemap.xml и возвращает пригодные для обхода URL того же домена.

    Результат нормализован, без дубликатов и ограничен ``config.max_urls``.
    При любой ошибке возвращается пустой список.
    """
    sitemap_url = origin_url(base_url, "/sitemap.xml")
    body = await fetcher.fetch_bytes(
        sitemap_url,
        accept="application/xml,text/xml",
        timeout=fetcher.config.robots_timeout,
    )
    if body is None:
        logger.debug("No sitemap.xml at %s", sitemap_url)
        return []

    urls: List[str] = []
    for loc in parse_sitemap(body):
        url = normalize_url(loc, base_url)
        if url and is_same_domain(url, base_domain) and not should_skip(url, disallowed_paths):
            urls.append(url)
    return remove_duplicates(urls)[: fetcher.config.max_urls]
