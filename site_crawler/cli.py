#!/usr/bin/env python3
"""
Точка входа для запуска краулера SiteCrawler через командную строку.

Команды:
  crawl URL   Обойти сайт и вывести/сохранить найденные URL
  serve       Запустить HTTP-сервер с SSE-эндпоинтом /crawl-website
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда crawl опции:
  --max-urls INT      Лимит найденных URL (override max_urls)
  --max-depth INT     Лимит глубины (override max_depth)
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с шаблоном report.html.j2
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --quiet             Не печатать события прогресса
  --crawl-timeout SEC Таймаут всего обхода (секунд)

Дополнительно:
  --version, -v       Показать версию SiteCrawler

Пример:
  site-crawler crawl https://example.com --json crawl.json --max-urls 200
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_crawler import __version__
from site_crawler.config import CrawlerConfig
from site_crawler.crawler.models import CrawlEvent, LogEvent, ProgressEvent
from site_crawler.engine import Engine
from site_crawler.logger import configure, init_logging
from site_crawler.report.html_report import render_html
from site_crawler.report.json_report import render_json
from site_crawler.server import run_server

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def echo_event(event: CrawlEvent) -> None:
    """Печатает события лога и прогресса в stderr; снимки URL не печатаются."""
    if isinstance(event, LogEvent):
        click.echo(event.message, err=True)
    elif isinstance(event, ProgressEvent):
        click.secho(
            f'[{event.discovered} found, {event.visited} visited, {event.queued} queued, ETA {event.eta}s]',
            fg='cyan',
            err=True,
        )


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteCrawler, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteCrawler CLI."""
    log_settings = dict(level=log_level, log_file=str(log_file) if log_file else None, log_format=log_format)
    init_logging(**log_settings)
    try:
        cfg = Engine.load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    ctx.obj['logging'] = log_settings


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--max-urls', 'max_urls', type=int, default=None, help='Лимит найденных URL')
@click.option('--max-depth', 'max_depth', type=int, default=None, help='Лимит глубины обхода')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном report.html.j2'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option('--quiet', '-q', is_flag=True, help='Не печатать события прогресса')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, url, max_urls, max_depth, json_output, html_output, template_dir, pretty, quiet, crawl_timeout):
    """Обойти сайт начиная с URL и сгенерировать отчёты."""
    cfg = ctx.obj['config']
    overrides = {k: v for k, v in (('max_urls', max_urls), ('max_depth', max_depth)) if v is not None}
    if overrides:
        try:
            cfg = CrawlerConfig(**{**cfg.model_dump(), **overrides})
        except ValidationError as e:
            print_error(f'Некорректные параметры: {e}')

    on_event = None if quiet else echo_event
    try:
        result = Engine(cfg).start_crawl(url, on_event, timeout=crawl_timeout)
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if not result.ok:
        print_error(f'Ошибка при обходе: {result.error}')

    # Без файлов отчёта печатаем в stdout
    if not json_output and not html_output:
        click.echo(result.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(result, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(result, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Адрес для прослушивания (override host)')
@click.option('--port', '-p', type=int, default=None, help='Порт (override port)')
@click.pass_context
def serve(ctx, host, port):
    """Запустить SSE-сервер POST /crawl-website."""
    cfg = ctx.obj['config']
    configure(**ctx.obj['logging'], access_log=True)
    click.echo(f'Serving on http://{host or cfg.host}:{port if port is not None else cfg.port}/crawl-website')
    run_server(cfg, host=host, port=port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
