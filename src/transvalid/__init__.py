"""Transvalid - Localized Validation Errors for Dataclasses and Values."""

from transvalid.errors import ValidationErrors, new_empty_error, new_error
from transvalid.translatable import TranslatableError, TranslatableField
from transvalid.validator import I18nValidator, new_validator

# Validation engine
from transvalid import engine
from transvalid.engine import Engine, FieldLevel, RuleFunc

# Translation
from transvalid import i18n
from transvalid.i18n import (
    CatalogTranslator,
    Translator,
    plural_few,
    plural_many,
    plural_one,
    plural_two,
    plural_zero,
)

# Options
from transvalid.options import (
    FORMAT_OPTIONS,
    Option,
    with_alpha_numeric_persian_validator,
    with_alpha_numeric_validator,
    with_builtin_messages,
    with_file_size_validator,
    with_file_type_validator,
    with_format_validators,
    with_ip_port_validator,
    with_ip_validator,
    with_iranian_credit_number_validator,
    with_iranian_iban_validator,
    with_iranian_id_number_validator,
    with_iranian_mobile_validator,
    with_iranian_national_code_validator,
    with_iranian_phone_validator,
    with_iranian_postal_code_validator,
    with_jalaali_validator,
    with_tag_resolver,
    with_translator,
    with_username_validator,
)

# Configuration
from transvalid.config import ConfigError, ValidatorConfig, build_validator, load_config

# Version: Single source of truth from pyproject.toml
try:
    from importlib.metadata import version, PackageNotFoundError

    __version__ = version("transvalid")
except PackageNotFoundError:
    # Package not installed (development mode)
    __version__ = "0.0.0.dev"
__all__ = [
    # Core API
    "I18nValidator",
    "new_validator",
    "ValidationErrors",
    "new_error",
    "new_empty_error",
    "TranslatableError",
    "TranslatableField",
    # Engine
    "engine",
    "Engine",
    "FieldLevel",
    "RuleFunc",
    # Translation
    "i18n",
    "CatalogTranslator",
    "Translator",
    "plural_zero",
    "plural_one",
    "plural_two",
    "plural_few",
    "plural_many",
    # Options
    "Option",
    "FORMAT_OPTIONS",
    "with_translator",
    "with_tag_resolver",
    "with_builtin_messages",
    "with_format_validators",
    "with_username_validator",
    "with_alpha_numeric_validator",
    "with_alpha_numeric_persian_validator",
    "with_iranian_phone_validator",
    "with_iranian_mobile_validator",
    "with_iranian_postal_code_validator",
    "with_iranian_id_number_validator",
    "with_iranian_national_code_validator",
    "with_iranian_credit_number_validator",
    "with_iranian_iban_validator",
    "with_ip_validator",
    "with_ip_port_validator",
    "with_jalaali_validator",
    "with_file_size_validator",
    "with_file_type_validator",
    # Configuration
    "ValidatorConfig",
    "ConfigError",
    "load_config",
    "build_validator",
    "__version__",
]
