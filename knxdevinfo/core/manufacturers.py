"""KNX manufacturer table, packaged as YAML and extensible by the user."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from knxdevinfo.core.config import config_dir, read_yaml, validate
from knxdevinfo.core.errors import ManufacturerTableError

LOGGER = logging.getLogger(__name__)
_SCHEMA = "manufacturers.schema.json"
_UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ManufacturerTable:
    names: dict[int, str]
    warnings: tuple[str, ...] = ()

    def name(self, manufacturer_id: int) -> str:
        return self.names.get(manufacturer_id, _UNKNOWN)


def _entries(doc: dict[Any, Any], source: Path | Traversable) -> dict[int, str]:
    validate(doc, _SCHEMA, source, validation_error=ManufacturerTableError)
    entries: dict[int, str] = {}
    for key, name in doc["manufacturers"].items():
        if isinstance(key, bool) or not isinstance(key, int) or not 0 <= key <= 0xFFFF:
            raise ManufacturerTableError(f"Manufacturer id '{key}' in {source} must be an integer 0..65535")
        entries[key] = name.strip()
    return entries


def _user_table_path() -> Path:
    return config_dir() / "manufacturers.yaml"


def load_manufacturers() -> ManufacturerTable:
    packaged = resources.files("knxdevinfo.data").joinpath("manufacturers.yaml")
    doc = read_yaml(packaged, load_error=ManufacturerTableError, validation_error=ManufacturerTableError)
    names = _entries(doc, packaged)
    warnings: list[str] = []

    user_path = _user_table_path()
    if user_path.is_file():
        doc = read_yaml(user_path, load_error=ManufacturerTableError, validation_error=ManufacturerTableError)
        for manufacturer_id, name in _entries(doc, user_path).items():
            if manufacturer_id in names and names[manufacturer_id] != name:
                warning = f"User manufacturer table overrides id {manufacturer_id} ({names[manufacturer_id]})"
                LOGGER.warning(warning)
                warnings.append(warning)
            names[manufacturer_id] = name

    return ManufacturerTable(names=names, warnings=tuple(warnings))


@lru_cache(maxsize=1)
def default_manufacturers() -> ManufacturerTable:
    return load_manufacturers()
