# File: site_crawler/utils.py
"""site_crawler.utils: URL canonicalisation and the skip policy shared by every crawler stage."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence
from urllib.parse import urljoin, urlsplit, urlunsplit

__all__: Sequence[str] = (
    "SKIP_EXTENSIONS",
    "SKIP_SCHEMES",
    "normalize_url",
    "ensure_scheme",
    "is_valid_seed",
    "extract_domain",
    "is_same_domain",
    "should_skip",
    "display_path",
    "remove_duplicates",
)

SKIP_EXTENSIONS: tuple[str, ...] = (
    ".pdf", ".jpg", ".jpeg", ".png", ".gif", ".zip", ".exe", ".dmg",
    ".mp4", ".mp3", ".avi", ".mov", ".doc", ".docx", ".xls", ".xlsx",
    ".ppt", ".pptx", ".svg", ".ico", ".webp", ".css", ".js",
)
SKIP_SCHEMES: frozenset[str] = frozenset({"mailto", "tel", "javascript"})

_HTTP_SCHEMES = ("http", "https")
_HOST_RE = re.compile(r"^(?:[\w-]+\.)*[\w-]+\.?$|^[0-9a-f:.]+$")


def normalize_url(href: str, base: str) -> Optional[str]:
    """Resolve *href* against *base* and return a comparable key.

    The fragment is dropped, scheme and host are lower-cased and trailing
    slashes are stripped unless the path is the root.  Non-HTTP schemes
    (``mailto:``, ``tel:``...) are passed through untouched so the skip
    policy can reject them.  Returns ``None`` for anything unparseable.
    """
    try:
        absolute = urljoin(base, href.strip())
        parts = urlsplit(absolute)
        scheme = parts.scheme.lower()
        if scheme not in _HTTP_SCHEMES:
            return absolute if scheme else None
        host = parts.hostname
        _ = parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if not host:
        return None

    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{hostport.lower()}"
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def ensure_scheme(raw: str) -> str:
    """Добавляет https:// к адресу без схемы (``example.com`` → ``https://example.com``)."""
    raw = raw.strip()
    if raw.startswith("//"):
        return f"https:{raw}"
    if "://" not in raw:
        return f"https://{raw}"
    return raw


def is_valid_seed(url: str) -> bool:
    """Проверяет, что URL абсолютный, http(s) и содержит корректное имя хоста."""
    try:
        parts = urlsplit(url)
        host = parts.hostname
        _ = parts.port
    except ValueError:
        return False
    if parts.scheme.lower() not in _HTTP_SCHEMES or not host:
        return False
    return bool(_HOST_RE.match(host))


def extract_domain(url: str) -> str:
    """Возвращает hostname из URL (пустая строка, если его нет)."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def is_same_domain(url: str, base_domain: str) -> bool:
    """Same-domain means hostname equality; subdomains are other sites."""
    host = extract_domain(url)
    return bool(host) and host == base_domain.lower()


def should_skip(url: str, disallowed_paths: Iterable[str] = ()) -> bool:
    """Return True when *url* must not be crawled.

    Any of: a blocked file extension in the lower-cased path or query, a
    ``mailto:``/``tel:``/``javascript:`` scheme, or a path starting with one of
    the robots.txt *disallowed_paths* prefixes.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return True
    if parts.scheme.lower() in SKIP_SCHEMES:
        return True

    tail = parts.path.lower()
    if parts.query:
        tail = f"{tail}?{parts.query.lower()}"
    if any(ext in tail for ext in SKIP_EXTENSIONS):
        return True

    path = parts.path or "/"
    return any(path.startswith(prefix) for prefix in disallowed_paths)


def display_path(url: str) -> str:
    """Path of *url* for log messages (``/`` for the root)."""
    try:
        return urlsplit(url).path or "/"
    except ValueError:
        return url


def remove_duplicates(urls: Iterable[str]) -> list[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    return list(dict.fromkeys(urls))
