"""
SiteCrawler package initializer.
Defines package version and exposes the CLI and the crawl entry points.
"""
__version__ = "0.1.0"

from site_crawler.cli import cli  # noqa: E402
from site_crawler.engine import CrawlResult, Engine, start_crawl  # noqa: E402

__all__ = ["__version__", "cli", "CrawlResult", "Engine", "start_crawl"]
