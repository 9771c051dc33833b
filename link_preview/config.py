# === FILE: link_preview/config.py ===
"""
Модуль для загрузки и валидации конфигурации сервиса LinkPreview.
Используется Pydantic для описания схемы и проверки данных.

Размер буфера (MAX_SIZE) и TTL кэша (MAX_AGE) намеренно не входят в конфиг:
это константы модулей fetcher и cache.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/137.0.0.0 Safari/537.36"
)


class ServiceConfig(BaseModel):
    """Конфигурация процесса: адрес сервера и параметры HTTP-клиента."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = Field("127.0.0.1", min_length=1, description="Адрес, на котором слушает сервер.")
    port: int = Field(8080, ge=1, le=65535, description="TCP-порт сервера.")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    pool_per_host: int = Field(10, ge=1, description="Макс. число соединений к одному хосту.")
    purge_interval: float = Field(300.0, gt=0, description="Период очистки просроченных записей кэша (секунд).")

    @field_validator("host", mode="before")
    def _strip_host(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


_DEFAULT_CFG = Path("configs/default.yaml")

# переменные окружения, перекрывающие значения из файла
_ENV_OVERRIDES = {"HOST": "host", "PORT": "port"}


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


def _read_file(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path)
    if suffix == ".json":
        return _read_json(path)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(
    path: Union[str, Path, None] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ServiceConfig.

    Без явного пути используется configs/default.yaml, если он есть, иначе
    значения по умолчанию. Явно указанный, но отсутствующий файл даёт
    FileNotFoundError. Переменные окружения HOST и PORT имеют приоритет над файлом.
    """
    data: dict[str, Any] = {}
    if path is None:
        if _DEFAULT_CFG.is_file():
            data = _read_file(_DEFAULT_CFG)
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
        data = _read_file(path_obj)

    env = os.environ if env is None else env
    for var, field in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            data[field] = value

    return ServiceConfig(**data)
