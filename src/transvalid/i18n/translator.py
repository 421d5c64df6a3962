"""In-memory pluralized message translator.

Messages are stored per locale and key. Each message has an ``other`` form and
optional plural forms; the form is chosen from the count with CLDR rules and
``{placeholder}`` markers are filled from the params.

Example:
    translator = CatalogTranslator("en")
    translator.add_message(
        "en", "min",
        "{field} must be at least {param} characters",
        plural_one("{field} must be at least {param} character"),
    )
    translator.plural("en", "min", 1, {"field": "name", "param": 1})
    # -> "name must be at least 1 character"
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Any, Mapping

from transvalid.i18n.plural import CLDRPluralRules
from transvalid.i18n.protocols import (
    BasePluralRuleProvider,
    LocaleInfo,
    PluralCategory,
    PluralOption,
)


logger = logging.getLogger("transvalid.i18n")

_PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def plural_zero(message: str) -> PluralOption:
    """Form used when the count is exactly zero."""
    return PluralOption(PluralCategory.ZERO, message)


def plural_one(message: str) -> PluralOption:
    return PluralOption(PluralCategory.ONE, message)


def plural_two(message: str) -> PluralOption:
    return PluralOption(PluralCategory.TWO, message)


def plural_few(message: str) -> PluralOption:
    return PluralOption(PluralCategory.FEW, message)


def plural_many(message: str) -> PluralOption:
    return PluralOption(PluralCategory.MANY, message)


def format_message(template: str, params: Mapping[str, Any]) -> str:
    """Fill ``{name}`` placeholders, leaving unknown ones untouched."""

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in params:
            return str(params[name])
        return match.group(0)

    return _PLACEHOLDER_RE.sub(replace, template)


class CatalogTranslator:
    """Locale-keyed message catalog with plural support.

    Lookup order for a locale: the exact tag (``fa-IR``), the base language
    (``fa``), then the fallback locale. An empty locale means the default
    locale.

    Registration and lookups share one lock, so a translator can be filled
    while other threads resolve messages.

    Attributes:
        default_locale: Locale used when none is given
        fallback_locale: Locale consulted when a key is missing
    """

    def __init__(
        self,
        default_locale: str = "en",
        fallback_locale: str | None = None,
        plural_rules: BasePluralRuleProvider | None = None,
    ) -> None:
        self.default_locale = LocaleInfo.parse(default_locale).tag
        self.fallback_locale = (
            LocaleInfo.parse(fallback_locale).tag if fallback_locale else None
        )
        self._plural_rules = plural_rules or CLDRPluralRules()
        self._catalogs: dict[str, dict[str, dict[PluralCategory, str]]] = {}
        self._lock = threading.Lock()

    def _normalize(self, locale: str) -> str:
        if not locale or not locale.strip():
            return self.default_locale
        return LocaleInfo.parse(locale).tag

    def add_message(
        self,
        locale: str,
        key: str,
        message: str,
        *options: PluralOption,
    ) -> None:
        """Register a message and its plural forms.

        Args:
            locale: Locale tag, empty for the default locale
            key: Message key
            message: Template for the ``other`` form
            *options: Additional plural forms
        """
        forms = {PluralCategory.OTHER: message}
        for option in options:
            forms[option.category] = option.message

        tag = self._normalize(locale)
        with self._lock:
            self._catalogs.setdefault(tag, {})[key] = forms
        logger.debug(f"Registered message '{key}' for locale '{tag}'")

    def has_message(self, locale: str, key: str) -> bool:
        return self._lookup(self._normalize(locale), key) is not None

    def locales(self) -> list[str]:
        """List locales with at least one message."""
        with self._lock:
            return sorted(self._catalogs.keys())

    def _candidates(self, tag: str) -> list[str]:
        candidates = [tag]
        language = LocaleInfo.parse(tag).language
        if language not in candidates:
            candidates.append(language)
        if self.fallback_locale and self.fallback_locale not in candidates:
            candidates.append(self.fallback_locale)
        return candidates

    def _lookup(self, tag: str, key: str) -> tuple[str, dict[PluralCategory, str]] | None:
        candidates = self._candidates(tag)
        with self._lock:
            for candidate in candidates:
                forms = self._catalogs.get(candidate, {}).get(key)
                if forms is not None:
                    return candidate, forms
        return None

    def plural(
        self,
        locale: str,
        key: str,
        count: int,
        params: Mapping[str, Any],
    ) -> str:
        """Resolve the plural form of key for count and format it.

        Args:
            locale: Locale tag, empty for the default locale
            key: Message key
            count: Quantity used to select the plural form
            params: Placeholder values; ``count`` is added when missing

        Returns:
            Formatted message, or an empty string when key is unknown
        """
        found = self._lookup(self._normalize(locale), key)
        if found is None:
            logger.debug(f"No message for '{key}' in locale '{locale}'")
            return ""

        resolved_locale, forms = found
        template = self._plural_rules.get_plural_form(
            count, forms, LocaleInfo.parse(resolved_locale)
        )
        values = {"count": count, **params}
        return format_message(template, values)

    def message(self, locale: str, key: str, params: Mapping[str, Any] | None = None) -> str:
        """Resolve a message without plural selection (``other`` form)."""
        found = self._lookup(self._normalize(locale), key)
        if found is None:
            return ""
        return format_message(found[1][PluralCategory.OTHER], params or {})
