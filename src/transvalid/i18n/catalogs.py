"""Built-in messages for the engine's standard rules.

Placeholders: ``{field}`` is the field display name and ``{param}`` the rule
parameter. Length rules carry plural forms keyed by the parameter.
"""

from __future__ import annotations

from typing import Any

from transvalid.i18n.loader import CatalogEntry, parse_catalog


# English messages
_ENGLISH_MESSAGES: dict[str, Any] = {
    "required": "{field} is required",
    "len": {
        "one": "{field} must be {param} character long",
        "other": "{field} must be {param} characters long",
    },
    "min": {
        "one": "{field} must be at least {param} character",
        "other": "{field} must be at least {param} characters",
    },
    "max": {
        "one": "{field} must be at most {param} character",
        "other": "{field} must be at most {param} characters",
    },
    "eq": "{field} must be equal to {param}",
    "ne": "{field} must not be equal to {param}",
    "gt": "{field} must be greater than {param}",
    "gte": "{field} must be greater than or equal to {param}",
    "lt": "{field} must be less than {param}",
    "lte": "{field} must be less than or equal to {param}",
    "oneof": "{field} must be one of [{param}]",
    "email": "{field} must be a valid email address",
    "alpha": "{field} can only contain alphabetic characters",
    "alphanum": "{field} can only contain alphanumeric characters",
    "numeric": "{field} must be a valid numeric value",
    "eqfield": "{field} must be equal to {param}",
    "nefield": "{field} cannot be equal to {param}",
    "gtfield": "{field} must be greater than {param}",
    "ltfield": "{field} must be less than {param}",
    "contains": "{field} must contain '{param}'",
    "startswith": "{field} must start with '{param}'",
    "endswith": "{field} must end with '{param}'",
}

# Persian messages
_PERSIAN_MESSAGES: dict[str, Any] = {
    "required": "{field} الزامی است",
    "len": "{field} باید {param} کاراکتر باشد",
    "min": "{field} باید حداقل {param} کاراکتر باشد",
    "max": "{field} باید حداکثر {param} کاراکتر باشد",
    "eq": "{field} باید برابر {param} باشد",
    "ne": "{field} نباید برابر {param} باشد",
    "gt": "{field} باید بزرگتر از {param} باشد",
    "gte": "{field} باید بزرگتر یا مساوی {param} باشد",
    "lt": "{field} باید کوچکتر از {param} باشد",
    "lte": "{field} باید کوچکتر یا مساوی {param} باشد",
    "oneof": "{field} باید یکی از [{param}] باشد",
    "email": "{field} باید یک ایمیل معتبر باشد",
    "alpha": "{field} فقط می‌تواند شامل حروف باشد",
    "alphanum": "{field} فقط می‌تواند شامل حروف و اعداد باشد",
    "numeric": "{field} باید یک مقدار عددی معتبر باشد",
    "eqfield": "{field} باید برابر {param} باشد",
    "nefield": "{field} نمی‌تواند برابر {param} باشد",
    "gtfield": "{field} باید بزرگتر از {param} باشد",
    "ltfield": "{field} باید کوچکتر از {param} باشد",
    "contains": "{field} باید شامل '{param}' باشد",
    "startswith": "{field} باید با '{param}' شروع شود",
    "endswith": "{field} باید با '{param}' تمام شود",
}

_CATALOGS: dict[str, dict[str, Any]] = {
    "en": _ENGLISH_MESSAGES,
    "fa": _PERSIAN_MESSAGES,
}


def get_supported_locales() -> list[str]:
    """List locales with built-in messages."""
    return list(_CATALOGS.keys())


def get_builtin_messages(*locales: str) -> list[CatalogEntry]:
    """Get built-in catalog entries.

    Args:
        *locales: Locales to include, all supported locales when empty

    Returns:
        Catalog entries for the requested locales
    """
    selected = locales or tuple(_CATALOGS.keys())
    data = {locale: _CATALOGS[locale] for locale in selected if locale in _CATALOGS}
    return parse_catalog(data, "<builtin>")
