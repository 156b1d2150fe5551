"""
Модуль для загрузки и валидации конфигурации SEO Scout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
)

from seo_scout.errors import JobError

__all__ = ("CrawlJob", "CrawlerSettings", "ScoutConfig", "load_config", "DEFAULT_CONFIG_PATH")


class CrawlJob(BaseModel):
    """Входные данные одного обхода. Неизменяемы на всё время обхода."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    start_url: HttpUrl = Field(..., alias="startUrl", description="Стартовый URL обхода.")
    max_pages: int = Field(50, gt=0, alias="maxPages", description="Жесткий лимит по числу страниц.")
    follow_external: bool = Field(
        False, alias="followExternal", description="Записывать внешние ссылки в результаты."
    )

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> CrawlJob:
        """Validate caller input, rejecting it as a :class:`JobError`."""
        if not data.get("startUrl") and not data.get("start_url"):
            raise JobError("Start URL is required")
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise JobError(f"Invalid crawl job: {exc}") from exc


class CrawlerSettings(BaseModel):
    """Технические параметры краулера."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("SEO-Crawler-Bot/1.0", min_length=1, description="Заголовок User-Agent.")
    delay: float = Field(0.1, ge=0, description="Пауза между запросами (секунд).")
    concurrency: int = Field(1, ge=1, description="Число одновременных загрузок.")
    crawl_timeout: Optional[float] = Field(
        None, gt=0, description="Таймаут всего обхода (секунд); None — без ограничения."
    )
    parser: Literal["regex", "soup"] = Field("regex", description="Способ извлечения HTML-сигналов.")


class ScoutConfig(BaseModel):
    """Содержимое файла конфигурации."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    crawler: CrawlerSettings = Field(default_factory=CrawlerSettings)
    job: Optional[CrawlJob] = None


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ScoutConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ScoutConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(DEFAULT_CONFIG_PATH))
        path_obj = DEFAULT_CONFIG_PATH
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return ScoutConfig(**data)
