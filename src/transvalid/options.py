"""Validator options.

An option is a callable applied to an ``I18nValidator`` by ``new_validator``.
Format options register a rule from ``transvalid.funcs`` together with its
messages; ``messages`` maps locales to templates (an empty locale means the
translator's default locale) and ``rule`` renames the rule.

Example:
    validator = new_validator(
        with_translator(CatalogTranslator("fa"), prefix="v"),
        with_builtin_messages(),
        with_iranian_national_code_validator({"fa": "{field} معتبر نیست"}),
    )
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from transvalid import funcs
from transvalid.engine import FieldLevel, RuleFunc, RuleSyntaxError
from transvalid.i18n import Translator, get_builtin_messages
from transvalid.utils import parse_size, resolve_messages, resolve_param, to_chars
from transvalid.validator import I18nValidator


logger = logging.getLogger("transvalid.options")

Option = Callable[[I18nValidator], None]

# Default English message of each format rule
DEFAULT_MESSAGES: dict[str, str] = {
    "username": "Only letters, numbers, and underscores are allowed",
    "alnum": "Only english letters and numbers are allowed",
    "alnum_fa": "Only english letters, persian letters, and numbers are allowed",
    "phone": "Must be a valid 11-digit iranian phone number",
    "mobile": "Must be a valid 11-digit iranian mobile number",
    "postal_code": "Must be a valid 10-digit iranian postal code",
    "id_number": "Must be a valid iranian birth certificate number",
    "national_code": "Must be a valid 10 digit iranian national id number",
    "credit_number": "Must be a valid 16 digit iranian credit card number",
    "iban": "Must be a valid 24 digit iranian IBAN number",
    "ip": "Must be a valid IP address",
    "ip_port": "Must be a valid IP:port address",
    "jalaali": "Must be a valid jalaali datetime",
    "file_size": "File size is outside the allowed range",
    "file_type": "File type is not allowed",
}

# Metadata keys checked, in order, by the tag resolver
TAG_NAME_KEYS = ("field", "json", "form", "xml")


def with_translator(translator: Translator, prefix: str = "") -> Option:
    """Use translator for messages and namespace rule keys with prefix."""
    prefix = prefix.strip()

    def apply(v: I18nValidator) -> None:
        v.set_translator(translator, prefix)

    return apply


def _resolve_tag_name(f: dataclasses.Field) -> str:
    name = ""
    for key in TAG_NAME_KEYS:
        candidate = str(f.metadata.get(key, "")).split(",", 1)[0]
        if candidate:
            name = candidate
            break

    if name == "-":
        return ""
    return name or f.name


def with_tag_resolver() -> Option:
    """Resolve field display names from dataclass field metadata.

    The ``field``, ``json``, ``form`` and ``xml`` metadata keys are checked in
    that order and the first comma separated segment is used. ``"-"`` or no
    key keeps the attribute name.
    """

    def apply(v: I18nValidator) -> None:
        v.engine.register_tag_name_func(_resolve_tag_name)

    return apply


def with_builtin_messages(*locales: str) -> Option:
    """Register the built-in messages of the engine's standard rules.

    Args:
        *locales: Locales to register, all built-in locales when empty
    """

    def apply(v: I18nValidator) -> None:
        if v.translator is None:
            logger.warning("with_builtin_messages() has no effect without a translator")
            return
        for entry in get_builtin_messages(*locales):
            v.add_translation(entry.locale, entry.key, entry.message, *entry.options)

    return apply


def _string_check(check: Callable[[str], bool]) -> RuleFunc:
    def rule(fl: FieldLevel) -> bool:
        return isinstance(fl.field, str) and check(fl.field)

    return rule


def _charset_check(check: Callable[..., bool]) -> RuleFunc:
    def rule(fl: FieldLevel) -> bool:
        return isinstance(fl.field, str) and check(fl.field, *to_chars(fl.param))

    return rule


def _format_option(
    default_rule: str,
    default_message: str,
    func: RuleFunc,
    messages: dict[str, str] | None,
    rule: str | None,
) -> Option:
    tag = resolve_param(default_rule, rule)
    resolved = resolve_messages(messages, default_message)

    def apply(v: I18nValidator) -> None:
        v.add_validation(tag, func)
        for locale, message in resolved.items():
            v.add_translation(locale, tag, message)

    return apply


def with_username_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """Letters, numbers and underscores (``username``)."""
    return _format_option(
        "username",
        DEFAULT_MESSAGES["username"],
        _string_check(funcs.is_valid_username),
        messages, rule,
    )


def with_alpha_numeric_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """English letters and numbers (``alnum``); the param lists extra allowed characters."""
    return _format_option(
        "alnum",
        DEFAULT_MESSAGES["alnum"],
        _charset_check(funcs.is_alpha_numeric),
        messages, rule,
    )


def with_alpha_numeric_persian_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """English letters, Persian letters and numbers (``alnum_fa``)."""
    return _format_option(
        "alnum_fa",
        DEFAULT_MESSAGES["alnum_fa"],
        _charset_check(funcs.is_alpha_numeric_with_persian),
        messages, rule,
    )


def with_iranian_phone_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """11 digit Iranian phone numbers (``phone``)."""
    return _format_option(
        "phone",
        DEFAULT_MESSAGES["phone"],
        _string_check(funcs.is_valid_iranian_phone),
        messages, rule,
    )


def with_iranian_mobile_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """11 digit Iranian mobile numbers (``mobile``)."""
    return _format_option(
        "mobile",
        DEFAULT_MESSAGES["mobile"],
        _string_check(funcs.is_valid_iranian_mobile),
        messages, rule,
    )


def with_iranian_postal_code_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """10 digit Iranian postal codes (``postal_code``)."""
    return _format_option(
        "postal_code",
        DEFAULT_MESSAGES["postal_code"],
        _string_check(funcs.is_valid_iranian_postal_code),
        messages, rule,
    )


def with_iranian_id_number_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """Iranian birth certificate numbers (``id_number``)."""
    return _format_option(
        "id_number",
        DEFAULT_MESSAGES["id_number"],
        _string_check(funcs.is_valid_iranian_id_number),
        messages, rule,
    )


def with_iranian_national_code_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """10 digit Iranian national ID numbers (``national_code``)."""
    return _format_option(
        "national_code",
        DEFAULT_MESSAGES["national_code"],
        _string_check(funcs.is_valid_iranian_national_code),
        messages, rule,
    )


def with_iranian_credit_number_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """16 digit Iranian bank card numbers (``credit_number``)."""
    return _format_option(
        "credit_number",
        DEFAULT_MESSAGES["credit_number"],
        _string_check(funcs.is_valid_iranian_bank_card),
        messages, rule,
    )


def with_iranian_iban_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """24 digit Iranian IBAN numbers (``iban``)."""
    return _format_option(
        "iban",
        DEFAULT_MESSAGES["iban"],
        _string_check(funcs.is_valid_iranian_iban),
        messages, rule,
    )


def with_ip_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """IPv4 or IPv6 addresses (``ip``)."""
    return _format_option(
        "ip",
        DEFAULT_MESSAGES["ip"],
        _string_check(funcs.is_valid_ip),
        messages, rule,
    )


def with_ip_port_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """``ip:port`` pairs (``ip_port``)."""
    return _format_option(
        "ip_port",
        DEFAULT_MESSAGES["ip_port"],
        _string_check(funcs.is_valid_ip_port),
        messages, rule,
    )


def _jalaali_rule(fl: FieldLevel) -> bool:
    return isinstance(fl.field, str) and funcs.is_valid_jalaali_date(fl.field, fl.param.strip())


def with_jalaali_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """Jalaali dates (``jalaali``).

    The param is a ``strftime`` layout, e.g. ``jalaali=%Y/%m/%d``; without
    one an ISO 8601 datetime or date is expected.
    """
    return _format_option("jalaali", DEFAULT_MESSAGES["jalaali"], _jalaali_rule, messages, rule)


def _size_bounds(fl: FieldLevel) -> tuple[int, int]:
    sizes = [parse_size(part) for part in fl.param.split()]
    if not 1 <= len(sizes) <= 2 or None in sizes:
        raise RuleSyntaxError(f"{fl.tag}={fl.param}", "expected <max> or <min> <max> byte sizes")
    if len(sizes) == 1:
        return 0, sizes[0]
    return sizes[0], sizes[1]


def _file_size_rule(fl: FieldLevel) -> bool:
    min_size, max_size = _size_bounds(fl)
    return funcs.is_file_content(fl.field) and funcs.is_valid_file_size(fl.field, min_size, max_size)


def with_file_size_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """Content size of bytes or a seekable binary file (``file_size``).

    The param is ``<max>`` or ``<min> <max>``, e.g. ``file_size=1KB 2MB``.
    """
    return _format_option("file_size", DEFAULT_MESSAGES["file_size"], _file_size_rule, messages, rule)


def _file_type_rule(fl: FieldLevel) -> bool:
    mimes = fl.param.split()
    if not mimes:
        raise RuleSyntaxError(fl.tag, "at least one MIME type is required")
    return funcs.is_file_content(fl.field) and funcs.is_valid_file_type(fl.field, *mimes)


def with_file_type_validator(messages: dict[str, str] | None = None, rule: str | None = None) -> Option:
    """Sniffed MIME type of bytes or a seekable binary file (``file_type``).

    The param lists the allowed types, e.g. ``file_type=image/png image/jpeg``.
    """
    return _format_option("file_type", DEFAULT_MESSAGES["file_type"], _file_type_rule, messages, rule)


# Default rule name -> option factory
FORMAT_OPTIONS: dict[str, Callable[..., Option]] = {
    "username": with_username_validator,
    "alnum": with_alpha_numeric_validator,
    "alnum_fa": with_alpha_numeric_persian_validator,
    "phone": with_iranian_phone_validator,
    "mobile": with_iranian_mobile_validator,
    "postal_code": with_iranian_postal_code_validator,
    "id_number": with_iranian_id_number_validator,
    "national_code": with_iranian_national_code_validator,
    "credit_number": with_iranian_credit_number_validator,
    "iban": with_iranian_iban_validator,
    "ip": with_ip_validator,
    "ip_port": with_ip_port_validator,
    "jalaali": with_jalaali_validator,
    "file_size": with_file_size_validator,
    "file_type": with_file_type_validator,
}


def with_format_validators(*rules: str) -> Option:
    """Enable format rules by their default names (all when empty).

    Raises:
        KeyError: If a rule name is unknown
    """
    selected = rules or tuple(FORMAT_OPTIONS.keys())
    options = [FORMAT_OPTIONS[name]() for name in selected]

    def apply(v: I18nValidator) -> None:
        for option in options:
            option(v)

    return apply
