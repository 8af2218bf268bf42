# File: tests/test_cli.py
"""Тесты для CLI (`site_crawler.cli`) с использованием click.testing.CliRunner.
Проверяют команды `crawl`, `config`, `--version`, а также обработку ошибок.
"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import site_crawler.engine as engine_module
from site_crawler.cli import cli
from site_crawler.crawler.models import LogEvent, ProgressEvent
from site_crawler.engine import CrawlResult

URLS = ["https://example.com/", "https://example.com/about"]


@pytest.fixture(autouse=True)
def patch_start_crawl(monkeypatch):
    """Патчим start_crawl: без сети, но с теми же событиями, что и у настоящего обхода."""
    calls = []

    async def fake_crawl(url, cfg, on_event=None):
        calls.append((url, cfg))
        if on_event is not None:
            on_event(LogEvent("Starting crawl of example.com"))
            on_event(ProgressEvent(discovered=2, visited=1, queued=1, eta=3))
        return CrawlResult(seed_url="https://example.com/", urls=list(URLS), events=3)

    monkeypatch.setattr(engine_module, "start_crawl", fake_crawl)
    return calls


@pytest.fixture()
def cfg_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_depth: 2\nmax_urls: 100\n", encoding="utf-8")
    return path


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteCrawler" in result.output


def test_show_config(cfg_file):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["max_depth"] == 2
    assert data["max_urls"] == 100
    assert data["user_agent"] == "SiteCrawlerBot/1.0"


def test_bad_config_file(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("max_urls: 0\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(bad), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_crawl_stdout(cfg_file, patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "example.com", "--quiet"])
    assert result.exit_code == 0
    output = json.loads(result.output)
    assert output["urls"] == URLS
    assert output["source"] == "crawl"
    assert output["error"] is None
    url, cfg = patch_start_crawl[0]
    assert url == "example.com"
    assert cfg.max_urls == 100


def test_crawl_prints_progress(cfg_file):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "example.com"])
    assert result.exit_code == 0
    assert "Starting crawl of example.com" in result.output
    assert "ETA 3s" in result.output


def test_crawl_overrides(cfg_file, patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["--config", str(cfg_file), "crawl", "example.com", "-q", "--max-urls", "5", "--max-depth", "0"],
    )
    assert result.exit_code == 0
    _, cfg = patch_start_crawl[0]
    assert (cfg.max_urls, cfg.max_depth) == (5, 0)


def test_crawl_invalid_override(cfg_file):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "example.com", "--max-urls", "0"])
    assert result.exit_code == 1
    assert "Некорректные параметры" in result.output


def test_crawl_json_file(cfg_file, tmp_path):
    out = tmp_path / "out.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "example.com", "-q", "--json", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["urls"] == URLS
    assert data["total"] == 2


def test_crawl_html_file(cfg_file, tmp_path):
    out = tmp_path / "report.html"
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "example.com", "-q", "--html", str(out)])
    assert result.exit_code == 0
    content = out.read_text(encoding="utf-8")
    assert "https://example.com/about" in content


def test_crawl_reports_error(monkeypatch, cfg_file):
    async def failing(url, cfg, on_event=None):
        return CrawlResult(seed_url=url, error="Invalid URL provided")

    monkeypatch.setattr(engine_module, "start_crawl", failing)
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "???", "-q"])
    assert result.exit_code == 1
    assert "Invalid URL provided" in result.output


def test_crawl_timeout(monkeypatch, cfg_file):
    async def slow(url, cfg, on_event=None):
        await asyncio.sleep(2)
        return CrawlResult(seed_url=url)

    monkeypatch.setattr(engine_module, "start_crawl", slow)
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "example.com", "--crawl-timeout", "0.2"])
    assert result.exit_code != 0
    assert "не завершён" in result.output
