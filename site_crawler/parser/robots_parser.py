# File: site_crawler/parser/robots_parser.py
"""site_crawler.parser.robots_parser: загрузка robots.txt и извлечение запрещённых путей."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple
from urllib.parse import urlsplit, urlunsplit

from site_crawler.logger import logger

if TYPE_CHECKING:
    from site_crawler.crawler.fetcher import Fetcher

__all__ = ["fetch_robots_policy", "parse_robots", "origin_url"]


def origin_url(base_url: str, path: str) -> str:
    """Собирает ``scheme://host[:port]{path}`` из base_url."""
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


async def fetch_robots_policy(fetcher: Fetcher, base_url: str, agent_token: str) -> List[str]:
    """Загружает /robots.txt и возвращает Disallow-префиксы для групп нашего краулера.

    Никогда не бросает исключений: отсутствие robots.txt, ошибка сети или
    таймаут означают «ограничений нет» и дают пустой список.
    """
    robots_url = origin_url(base_url, "/robots.txt")
    text = await fetcher.fetch_text(robots_url, accept="text/plain", timeout=fetcher.config.robots_timeout)
    if text is None:
        logger.debug("No robots.txt at %s", robots_url)
        return []
    return parse_robots(text, agent_token)


def parse_robots(text: str, agent_token: str) -> List[str]:
    """Разбирает текст robots.txt построчно.

    Подряд идущие строки ``User-agent`` образуют одну группу. Группа
    применяется, если её агент равен ``*`` или содержит *agent_token* (без учёта
    регистра): при токене ``"bot"`` к нам относится и группа ``Googlebot``.
    Учитываются только непустые ``Disallow`` из таких групп; строки вне групп
    и неизвестные директивы игнорируются.
    """
    disallowed: List[str] = []
    current_agents: List[str] = []
    in_agent_lines = False

    for directive, value in _prepare_lines(text):
        if directive == "user-agent":
            if not in_agent_lines:
                current_agents.clear()
            current_agents.append(value)
            in_agent_lines = True
            continue
        in_agent_lines = False
        if directive == "disallow" and value and _matches_agent(current_agents, agent_token):
            disallowed.append(value)

    return disallowed


def _prepare_lines(text: str) -> List[Tuple[str, str]]:
    """Очищает текст от комментариев и разделяет на (директива, значение)."""
    lines: List[Tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        key, val = (part.strip() for part in line.split(":", 1))
        lines.append((key.lower(), val))
    return lines


def _matches_agent(agents: List[str], agent_token: str) -> bool:
    """Проверяет, относится ли группа с такими агентами к краулеру с agent_token."""
    token = agent_token.lower()
    return any(agent == "*" or token in agent.lower() for agent in agents)
