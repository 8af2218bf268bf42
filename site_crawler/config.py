"""site_crawler.config: настройки обхода и SSE-сервера (pydantic-модель и загрузка из YAML/JSON)."""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Tuple, Type, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CrawlerConfig(BaseModel):
    """Параметры одного запуска обхода и HTTP-сервера."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_depth: int = Field(6, ge=0, description="Максимальная глубина обхода ссылок.")
    max_urls: int = Field(1000, ge=1, description="Жесткий лимит на число найденных URL.")
    page_timeout: float = Field(10.0, gt=0, description="Таймаут загрузки одной страницы (секунд).")
    robots_timeout: float = Field(5.0, gt=0, description="Таймаут загрузки robots.txt и sitemap.xml.")
    request_delay: float = Field(0.05, ge=0, description="Пауза перед каждым запросом страницы (секунд).")
    progress_every: int = Field(5, ge=1, description="Как часто (в страницах) отправлять progress.")
    user_agent: str = Field("SiteCrawlerBot/1.0", min_length=1, description="Заголовок User-Agent.")
    robots_token: str = Field("bot", min_length=1, description="Подстрока User-agent в robots.txt, по которой группа относится к нам.")
    event_buffer: int = Field(256, ge=1, description="Размер очереди событий между краулером и потребителем.")
    host: str = Field("127.0.0.1", min_length=1, description="Адрес SSE-сервера.")
    port: int = Field(8080, ge=0, le=65535, description="Порт SSE-сервера.")

    @field_validator("user_agent", "robots_token", mode="before")
    def _strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")

# suffix -> (format name, parser, parser's error type)
_FORMATS: Dict[str, Tuple[str, Callable[[str], Any], Type[Exception]]] = {
    ".yaml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".yml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".json": ("JSON", json.loads, json.JSONDecodeError),
}


def _read_mapping(path: Path) -> dict[str, Any]:
    """Разбирает файл конфига в словарь; пустой YAML-файл даёт пустой словарь."""
    try:
        name, parse, error = _FORMATS[path.suffix.lower()]
    except KeyError:
        raise ValueError(f"Неподдерживаемый формат конфига: {path.suffix}") from None

    try:
        data = parse(path.read_text(encoding="utf-8"))
    except error as exc:
        raise ValueError(f"Неправильный {name} в {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень {name} должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Возвращает проверенный CrawlerConfig из YAML- или JSON-файла.

    ``None`` означает configs/default.yaml в текущей директории, а при его
    отсутствии значения по умолчанию. Явно указанный несуществующий файл
    даёт FileNotFoundError, ошибки значений дают pydantic.ValidationError.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return CrawlerConfig()
        return CrawlerConfig(**_read_mapping(DEFAULT_CONFIG_PATH))

    config_path = Path(path).expanduser().resolve()
    if not config_path.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(config_path))
    return CrawlerConfig(**_read_mapping(config_path))


__all__ = ["CrawlerConfig", "DEFAULT_CONFIG_PATH", "load_config"]
