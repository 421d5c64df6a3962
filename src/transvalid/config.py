"""Validator configuration.

A ``ValidatorConfig`` describes a ready-to-use validator: the locales, the
rule key prefix, the catalog files to load and the format rules to enable.
It can be read from a YAML file or from ``TRANSVALID_*`` environment
variables.

Example (transvalid.yaml):
    locale: fa
    fallback_locale: en
    prefix: v
    catalogs:
      - messages/fa.yaml
    rules: [national_code, mobile, iban]
    tag_resolver: true
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from transvalid.i18n import CatalogTranslator
from transvalid.options import (
    FORMAT_OPTIONS,
    Option,
    with_builtin_messages,
    with_format_validators,
    with_tag_resolver,
    with_translator,
)
from transvalid.validator import I18nValidator, new_validator


logger = logging.getLogger("transvalid.config")

ENV_PREFIX = "TRANSVALID_"


class ConfigError(Exception):
    """Invalid or unreadable configuration."""

    pass


def _parse_bool(value: str) -> bool:
    if value.lower() in ("true", "yes", "1", "on"):
        return True
    if value.lower() in ("false", "no", "0", "off", ""):
        return False
    raise ConfigError(f"Invalid boolean value: {value!r}")


def _string_list(name: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        raise ConfigError(f"'{name}' must be a list")
    return [str(item).strip() for item in value if str(item).strip()]


@dataclass
class ValidatorConfig:
    """Settings used by ``build_validator``.

    Attributes:
        locale: Default locale of the translator
        fallback_locale: Locale tried when a message is missing
        prefix: Rule key prefix
        catalogs: Catalog files (YAML or JSON) to load
        rules: Format rules to enable, by default name
        builtin_messages: Register messages for the standard rules
        tag_resolver: Resolve field names from dataclass metadata
    """
    locale: str = "en"
    fallback_locale: str | None = None
    prefix: str = ""
    catalogs: list[Path] = field(default_factory=list)
    rules: list[str] = field(default_factory=list)
    builtin_messages: bool = True
    tag_resolver: bool = False

    def __post_init__(self) -> None:
        self.locale = self.locale.strip() or "en"
        self.prefix = self.prefix.strip()
        self.catalogs = [Path(p) for p in self.catalogs]
        unknown = [r for r in self.rules if r not in FORMAT_OPTIONS]
        if unknown:
            raise ConfigError(f"Unknown format rule(s): {', '.join(unknown)}")

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> "ValidatorConfig":
        """Create a config from a mapping.

        Args:
            data: Mapping with ``ValidatorConfig`` field names as keys
            base_dir: Directory relative catalog paths are resolved against

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")

        kwargs: dict[str, Any] = {}
        for key in ("locale", "prefix"):
            if key in data:
                kwargs[key] = str(data[key] or "")
        if data.get("fallback_locale"):
            kwargs["fallback_locale"] = str(data["fallback_locale"])
        for key in ("builtin_messages", "tag_resolver"):
            if key in data:
                if not isinstance(data[key], bool):
                    raise ConfigError(f"'{key}' must be a boolean")
                kwargs[key] = data[key]

        kwargs["rules"] = _string_list("rules", data.get("rules"))
        catalogs = [Path(p) for p in _string_list("catalogs", data.get("catalogs"))]
        if base_dir is not None:
            catalogs = [p if p.is_absolute() else base_dir / p for p in catalogs]
        kwargs["catalogs"] = catalogs

        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ValidatorConfig":
        """Create a config from ``TRANSVALID_*`` environment variables.

        ``TRANSVALID_CATALOGS`` is ``os.pathsep`` separated and
        ``TRANSVALID_RULES`` is comma separated.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            return env.get(f"{ENV_PREFIX}{name}")

        kwargs: dict[str, Any] = {}
        if get("LOCALE"):
            kwargs["locale"] = get("LOCALE")
        if get("FALLBACK_LOCALE"):
            kwargs["fallback_locale"] = get("FALLBACK_LOCALE")
        if get("PREFIX") is not None:
            kwargs["prefix"] = get("PREFIX")
        if get("CATALOGS"):
            kwargs["catalogs"] = [Path(p) for p in get("CATALOGS").split(os.pathsep) if p.strip()]
        if get("RULES"):
            kwargs["rules"] = _string_list("rules", get("RULES"))
        if get("BUILTIN_MESSAGES") is not None:
            kwargs["builtin_messages"] = _parse_bool(get("BUILTIN_MESSAGES"))
        if get("TAG_RESOLVER") is not None:
            kwargs["tag_resolver"] = _parse_bool(get("TAG_RESOLVER"))

        return cls(**kwargs)


def load_config(path: Path | str) -> ValidatorConfig:
    """Read a YAML configuration file.

    Relative catalog paths are resolved against the file's directory.

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    logger.debug(f"Loaded configuration from {path}")
    return ValidatorConfig.from_dict(data, base_dir=path.parent)


def build_validator(config: ValidatorConfig | None = None) -> I18nValidator:
    """Build a validator from a configuration.

    Args:
        config: Settings, ``ValidatorConfig()`` by default

    Returns:
        Configured validator

    Raises:
        CatalogLoadError: If a catalog file cannot be loaded
    """
    config = config or ValidatorConfig()
    translator = CatalogTranslator(config.locale, config.fallback_locale)

    options: list[Option] = [with_translator(translator, config.prefix)]
    if config.tag_resolver:
        options.append(with_tag_resolver())
    if config.builtin_messages:
        options.append(with_builtin_messages())
    if config.rules:
        options.append(with_format_validators(*config.rules))

    validator = new_validator(*options)
    for catalog in config.catalogs:
        validator.load_translations(catalog)

    return validator
