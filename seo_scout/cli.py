#!/usr/bin/env python3
"""
Точка входа для запуска SEO Scout через командную строку.

Команды:
  crawl URL   Обойти сайт, проанализировать страницы и вывести/сохранить отчёт
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --max-pages INT       Макс. число страниц (default 50)
  --follow-external     Записывать внешние ссылки
  --concurrency INT     Число одновременных загрузок
  --parser NAME         regex | soup
  --json PATH           Сохранить JSON-отчёт в файл
  --full                Полный отчёт (все страницы, граф ссылок) вместо превью
  --pretty              Преформатировать JSON-вывод (отступ 2)
  --crawl-timeout SEC   Таймаут всего обхода (секунд)

Пример:
  seo-scout crawl https://example.com --max-pages 100 --json report.json --full
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from seo_scout import __version__
from seo_scout.config import CrawlerSettings, CrawlJob, ScoutConfig, DEFAULT_CONFIG_PATH, load_config
from seo_scout.aggregator import PREVIEW_SIZE
from seo_scout.engine import crawl_async
from seo_scout.errors import JobError
from seo_scout.logger import DEFAULT_FORMAT, init_logging
from seo_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SEO Scout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
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
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SEO Scout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
        stream=sys.stderr,
    )
    cfg = ScoutConfig()
    if config_path is not None or DEFAULT_CONFIG_PATH.exists():
        try:
            cfg = load_config(config_path)
        except (OSError, ValueError, TypeError) as e:
            print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False)
@click.option('--max-pages', '-n', 'max_pages', type=click.IntRange(min=1), default=None,
              help='Макс. число страниц (override job.max_pages)')
@click.option('--follow-external', is_flag=True, default=False,
              help='Записывать внешние ссылки в результаты')
@click.option('--concurrency', type=click.IntRange(min=1), default=None,
              help='Число одновременных загрузок')
@click.option('--parser', 'parser_name', type=click.Choice(['regex', 'soup']), default=None,
              help='Способ извлечения HTML-сигналов')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option('--full', is_flag=True, help='Все страницы и граф ссылок вместо превью из 20')
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option('--crawl-timeout', 'crawl_timeout', type=float, default=None,
              help='Таймаут всего обхода (секунд)')
@click.pass_context
def crawl(ctx, url, max_pages, follow_external, concurrency, parser_name,
          json_output, full, pretty, crawl_timeout):
    """Обойти сайт начиная с URL и сгенерировать отчёт."""
    cfg: ScoutConfig = ctx.obj['config']

    job_data = cfg.job.model_dump(mode='json') if cfg.job else {}
    if url:
        job_data['start_url'] = url
    if max_pages is not None:
        job_data['max_pages'] = max_pages
    if follow_external:
        job_data['follow_external'] = True
    try:
        job = CrawlJob.parse(job_data)
    except JobError as e:
        print_error(f'Ошибка задания: {e}')

    overrides = {
        'concurrency': concurrency,
        'parser': parser_name,
        'crawl_timeout': crawl_timeout,
    }
    try:
        settings = CrawlerSettings.model_validate(
            {**cfg.crawler.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
        )
    except ValidationError as e:
        print_error(f'Ошибка конфигурации: {e}')

    try:
        report = asyncio.run(run_crawl(job, settings))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {settings.crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    preview = None if full else PREVIEW_SIZE

    if not json_output:
        click.echo(report.json(pretty=pretty, preview=preview))
        return

    try:
        saved = render_json(report, json_output, preview=preview)
    except OSError as e:
        print_error(f'Ошибка при сохранении JSON: {e}')
    click.echo(f'JSON report: {saved}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg: ScoutConfig = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


# expose these names at module level for test monkey-patching
run_crawl = crawl_async

if __name__ == "__main__":
    cli()
