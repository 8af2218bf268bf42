# File: site_crawler/report/__init__.py
"""site_crawler.report: генерация отчётов (JSON и HTML) по результату обхода."""

from site_crawler.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from site_crawler.report.json_report import render_json

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
