#!/usr/bin/env python3
"""
Точка входа сервиса LinkPreview через командную строку.

Команды:
  serve     Запустить HTTP-сервер (GET /link_preview?url=...)
  preview   Получить метаданные одной страницы и вывести JSON
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию LinkPreview

Пример:
  link-preview --log-level DEBUG serve --port 9000
  link-preview preview https://example.com --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from link_preview import __version__
from link_preview.config import load_config
from link_preview.logger import DEFAULT_FORMAT, init_logging
from link_preview.models import Success
from link_preview.server import run_server
from link_preview.service import LinkPreviewService

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


async def fetch_preview(cfg, url):
    async with LinkPreviewService(cfg) as service:
        return await service.get_preview(url)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkPreview, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML или JSON.'
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
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд LinkPreview CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Адрес для прослушивания (override config/HOST)')
@click.option('--port', default=None, type=click.IntRange(1, 65535), help='Порт (override config/PORT)')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP-сервер."""
    cfg = ctx.obj['config']
    overrides = {k: v for k, v in (('host', host), ('port', port)) if v is not None}
    if overrides:
        cfg = cfg.model_copy(update=overrides)
    run_server(cfg)


@cli.command('preview', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def preview(ctx, url, pretty):
    """Получить метаданные страницы URL и вывести их в JSON."""
    cfg = ctx.obj['config']
    outcome = asyncio.run(fetch_preview(cfg, url))
    if not isinstance(outcome, Success):
        print_error(outcome.error)
    indent = 2 if pretty else None
    click.echo(json.dumps(outcome.metadata.to_dict(), ensure_ascii=False, indent=indent))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
