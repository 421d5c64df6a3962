"""Pluralized, locale-keyed message translation for validator errors.

Example:
    from transvalid.i18n import CatalogTranslator, plural_one

    translator = CatalogTranslator("en")
    translator.add_message(
        "en", "min",
        "{field} must be at least {param} characters",
        plural_one("{field} must be at least {param} character"),
    )
    translator.plural("en", "min", 3, {"field": "name", "param": 3})
    # -> "name must be at least 3 characters"
"""

from transvalid.i18n.protocols import (
    BasePluralRuleProvider,
    LocaleInfo,
    PluralCategory,
    PluralOption,
    Translator,
)

from transvalid.i18n.plural import (
    CLDRPluralRules,
    PluralOperands,
)

from transvalid.i18n.translator import (
    CatalogTranslator,
    format_message,
    plural_few,
    plural_many,
    plural_one,
    plural_two,
    plural_zero,
)

from transvalid.i18n.loader import (
    CatalogEntry,
    CatalogLoadError,
    load_catalog_file,
    parse_catalog,
)

from transvalid.i18n.catalogs import (
    get_builtin_messages,
    get_supported_locales,
)

__all__ = [
    # Protocols and types
    "BasePluralRuleProvider",
    "LocaleInfo",
    "PluralCategory",
    "PluralOption",
    "Translator",
    # Plural rules
    "CLDRPluralRules",
    "PluralOperands",
    # Translator
    "CatalogTranslator",
    "format_message",
    "plural_zero",
    "plural_one",
    "plural_two",
    "plural_few",
    "plural_many",
    # Loading
    "CatalogEntry",
    "CatalogLoadError",
    "load_catalog_file",
    "parse_catalog",
    # Built-in catalogs
    "get_builtin_messages",
    "get_supported_locales",
]
