"""seo_scout.report: сохранение отчётов обхода."""

from seo_scout.report.json_report import render_json

__all__ = ["render_json"]
