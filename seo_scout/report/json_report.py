# seo_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта SEO Scout.

Сериализация объекта CrawlReport в файл.
"""
import json
from pathlib import Path
from typing import Optional

from seo_scout.aggregator import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str, preview: Optional[int] = None) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект CrawlReport с данными обхода
    :param output_path: путь к JSON-файлу
    :param preview: сколько результатов страниц сохранить (None — все, с графом ссылок)
    :return: Path сохранённого файла

    Пример:
    ```python
    from seo_scout.report.json_report import render_json
    report_path = render_json(report, 'reports/crawl.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.to_dict(preview), f, ensure_ascii=False, indent=2)

    return output
