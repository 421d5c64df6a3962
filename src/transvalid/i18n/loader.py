"""Catalog file loading.

Catalog files map locales to message keys. A message is either a plain
template (the ``other`` form) or a mapping of plural categories:

    en:
      required: "{field} is required"
      min:
        one: "{field} must be at least {param} character"
        other: "{field} must be at least {param} characters"

YAML (``.yaml``/``.yml``) and JSON (``.json``) files are supported.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from transvalid.i18n.protocols import PluralCategory, PluralOption


class CatalogLoadError(Exception):
    """Raised when a catalog file cannot be read or has an invalid shape."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid catalog '{path}': {reason}")


@dataclass(frozen=True)
class CatalogEntry:
    """One message of a catalog file."""

    locale: str
    key: str
    message: str
    options: tuple[PluralOption, ...] = field(default_factory=tuple)


def _parse_forms(path: Path, locale: str, key: str, value: Any) -> CatalogEntry:
    if isinstance(value, str):
        return CatalogEntry(locale=locale, key=key, message=value)

    if not isinstance(value, dict):
        raise CatalogLoadError(path, f"message '{locale}.{key}' must be a string or mapping")

    options: list[PluralOption] = []
    other: str | None = None
    for category_name, template in value.items():
        try:
            category = PluralCategory(str(category_name).lower())
        except ValueError:
            raise CatalogLoadError(
                path, f"unknown plural category '{category_name}' in '{locale}.{key}'"
            ) from None
        if not isinstance(template, str):
            raise CatalogLoadError(path, f"plural form '{locale}.{key}.{category_name}' must be a string")
        if category is PluralCategory.OTHER:
            other = template
        else:
            options.append(PluralOption(category, template))

    if other is None:
        raise CatalogLoadError(path, f"message '{locale}.{key}' has no 'other' form")

    return CatalogEntry(locale=locale, key=key, message=other, options=tuple(options))


def parse_catalog(data: Any, path: Path | str = "<memory>") -> list[CatalogEntry]:
    """Convert a decoded catalog document into entries.

    Args:
        data: Decoded document
        path: Source path, used in error messages

    Returns:
        Catalog entries in document order
    """
    path = Path(path)
    if data is None:
        return []
    if not isinstance(data, dict):
        raise CatalogLoadError(path, "top level must be a mapping of locales")

    entries: list[CatalogEntry] = []
    for locale, messages in data.items():
        if not isinstance(messages, dict):
            raise CatalogLoadError(path, f"locale '{locale}' must map keys to messages")
        for key, value in messages.items():
            entries.append(_parse_forms(path, str(locale), str(key), value))
    return entries


def load_catalog_file(path: Path | str) -> list[CatalogEntry]:
    """Read a YAML or JSON catalog file.

    Raises:
        CatalogLoadError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError:
        raise CatalogLoadError(path, "file not found") from None
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise CatalogLoadError(path, str(e)) from e

    return parse_catalog(data, path)
