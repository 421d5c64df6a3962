"""i18n protocol definitions and shared types.

Types:
- PluralCategory: CLDR plural categories
- LocaleInfo: parsed locale tag
- PluralOption: an extra plural form attached to a message

Protocols:
- Translator: pluralized, locale-keyed message translator
- BasePluralRuleProvider: plural category selection
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol, runtime_checkable


class PluralCategory(str, Enum):
    """CLDR plural categories.

    Based on Unicode CLDR plural rules:
    https://cldr.unicode.org/index/cldr-spec/plural-rules
    """
    ZERO = "zero"
    ONE = "one"
    TWO = "two"
    FEW = "few"
    MANY = "many"
    OTHER = "other"


@dataclass(frozen=True)
class LocaleInfo:
    """Parsed locale tag.

    Attributes:
        language: ISO 639-1 language code (e.g., "en", "fa")
        region: ISO 3166-1 region code (e.g., "US", "IR")
        script: ISO 15924 script code (e.g., "Latn", "Arab")
    """
    language: str
    region: str | None = None
    script: str | None = None

    @property
    def tag(self) -> str:
        """Get the normalized BCP 47 tag."""
        parts = [self.language]
        if self.script:
            parts.append(self.script)
        if self.region:
            parts.append(self.region)
        return "-".join(parts)

    @classmethod
    def parse(cls, tag: str) -> "LocaleInfo":
        """Parse a locale tag.

        Accepts "fa", "fa-IR", "fa_IR", "sr-Latn-RS". Unknown subtags are
        ignored.

        Args:
            tag: Locale tag string

        Returns:
            Parsed LocaleInfo
        """
        parts = tag.strip().replace("_", "-").split("-")
        language = parts[0].lower()
        region = None
        script = None

        for part in parts[1:]:
            if len(part) == 4 and part.isalpha():
                script = part.capitalize()
            elif len(part) == 2 and part.isalpha():
                region = part.upper()
            elif len(part) == 3 and part.isdigit():
                region = part

        return cls(language=language, region=region, script=script)


@dataclass(frozen=True)
class PluralOption:
    """A plural form for a message.

    The message passed to ``add_message`` itself is the ``other`` form;
    options add the remaining categories.
    """
    category: PluralCategory
    message: str


@runtime_checkable
class Translator(Protocol):
    """Protocol for the pluralized message translator used by validators."""

    def add_message(
        self,
        locale: str,
        key: str,
        message: str,
        *options: PluralOption,
    ) -> None:
        """Register a message (``other`` form) and optional plural forms."""
        ...

    def plural(
        self,
        locale: str,
        key: str,
        count: int,
        params: Mapping[str, Any],
    ) -> str:
        """Resolve and format the plural form of key for count.

        Returns:
            The formatted message, or an empty string if key is unknown
        """
        ...


class BasePluralRuleProvider(ABC):
    """Abstract base class for plural rule providers."""

    @abstractmethod
    def get_category(self, count: float | int, locale: LocaleInfo) -> PluralCategory:
        """Get the plural category for a number."""
        pass

    def get_plural_form(
        self,
        count: float | int,
        forms: Mapping[PluralCategory, str],
        locale: LocaleInfo,
    ) -> str:
        """Select the appropriate plural form.

        An explicit ``zero`` form always wins for a zero count, then the
        locale category, then ``other``.
        """
        if count == 0 and PluralCategory.ZERO in forms:
            return forms[PluralCategory.ZERO]

        category = self.get_category(count, locale)
        if category in forms:
            return forms[category]

        if PluralCategory.OTHER in forms:
            return forms[PluralCategory.OTHER]

        return next(iter(forms.values()))
