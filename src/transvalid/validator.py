"""Localized validator.

``I18nValidator`` runs the engine for a validation request and turns its
violations into a ``ValidationErrors`` aggregate with translated messages.

Translation of one violation:
    1. a value implementing ``TranslatableError`` may answer directly
    2. the rule key gets the configured prefix (``prefix.rule``)
    3. a value implementing ``TranslatableField`` may rename the field
    4. the translator resolves the plural form for the parameter count

Example:
    validator = new_validator(with_translator(CatalogTranslator("en")))
    validator.add_validation("is_valid", lambda fl: fl.field == "valid")
    validator.add_translation("en", "is_valid", "{field} must be valid")

    errs = validator.var("en", "code", "invalid", "is_valid")
    errs.errors()  # {"code": {"is_valid": "code must be valid"}}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from transvalid.engine import Engine, EngineError, FieldViolations, RuleFunc
from transvalid.errors import ValidationErrors, new_empty_error, new_error
from transvalid.i18n import PluralOption, Translator, load_catalog_file
from transvalid.translatable import TranslatableError, TranslatableField
from transvalid.utils import coerce_param

if TYPE_CHECKING:
    from transvalid.options import Option


logger = logging.getLogger("transvalid.validator")


class I18nValidator:
    """Validator producing localized, structured errors.

    Instances are configured once through options and then used for any
    number of validation calls.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or Engine()
        self._translator: Translator | None = None
        self._prefix = ""

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def translator(self) -> Translator | None:
        return self._translator

    @property
    def prefix(self) -> str:
        return self._prefix

    def set_translator(self, translator: Translator | None, prefix: str = "") -> None:
        """Configure the translator and the rule key prefix."""
        self._translator = translator
        self._prefix = prefix.strip()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _rule_key(self, rule: str) -> str:
        if self._prefix:
            return f"{self._prefix}.{rule}"
        return rule

    def add_validation(self, rule: str, func: RuleFunc) -> None:
        """Register a custom rule. Blank rule names are ignored."""
        rule = rule.strip()
        if not rule:
            logger.warning("Ignoring validation with an empty rule name")
            return
        self._engine.register_validation(rule, func)

    def add_translation(
        self,
        locale: str,
        rule: str,
        message: str,
        *options: PluralOption,
    ) -> None:
        """Register a message for a rule, under the prefixed rule key.

        Ignored when the rule is blank or no translator is configured.

        Args:
            locale: Locale tag, empty for the translator's default locale
            rule: Rule name
            message: Message template (``{field}``, ``{param}``)
            *options: Plural forms
        """
        rule = rule.strip()
        if not rule or self._translator is None:
            logger.debug(f"Ignoring translation for rule '{rule}'")
            return
        self._translator.add_message(locale, self._rule_key(rule), message, *options)

    def load_translations(self, path: Path | str) -> int:
        """Register every message of a catalog file.

        Returns:
            Number of messages registered

        Raises:
            CatalogLoadError: If the file cannot be loaded
        """
        entries = load_catalog_file(path)
        for entry in entries:
            self.add_translation(entry.locale, entry.key, entry.message, *entry.options)
        logger.debug(f"Loaded {len(entries)} translation(s) from {path}")
        return len(entries)

    # ------------------------------------------------------------------
    # Validation entry points
    # ------------------------------------------------------------------

    def struct(self, locale: str, value: Any) -> ValidationErrors:
        """Validate every field of a dataclass instance."""
        return self._parse_struct_errors(locale, value, self._run(self._engine.struct, value))

    def struct_except(self, locale: str, value: Any, *fields: str) -> ValidationErrors:
        """Validate a dataclass instance, skipping the given fields."""
        return self._parse_struct_errors(
            locale, value, self._run(self._engine.struct_except, value, *fields)
        )

    def struct_partial(self, locale: str, value: Any, *fields: str) -> ValidationErrors:
        """Validate only the given fields of a dataclass instance."""
        return self._parse_struct_errors(
            locale, value, self._run(self._engine.struct_partial, value, *fields)
        )

    def var(self, locale: str, name: str, value: Any, rules: str) -> ValidationErrors:
        """Validate a single value; errors are reported under name."""
        return self._parse_variable_errors(
            locale, name, value, self._run(self._engine.var, value, rules)
        )

    def var_with_value(
        self,
        locale: str,
        name: str,
        value: Any,
        other: Any,
        rules: str,
    ) -> ValidationErrors:
        """Validate a value with rules comparing it to other."""
        return self._parse_variable_errors(
            locale, name, value, self._run(self._engine.var_with_value, value, other, rules)
        )

    @staticmethod
    def _run(func: Callable[..., None], *args: Any) -> EngineError | None:
        try:
            func(*args)
        except EngineError as e:
            return e
        return None

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    def _translate(
        self,
        locale: str,
        name: str,
        rule: str,
        field: str,
        param: Any,
        value: Any,
        count: int,
    ) -> str:
        """Generate a localized message for one failed rule.

        Args:
            locale: Target locale
            name: Field display name
            rule: Rule name, without prefix
            field: Structural field name passed to the value hooks
            param: Rule parameter (str, int or float)
            value: The validated value
            count: Plural count derived from param

        Returns:
            Translated message, empty when no translator is configured or the
            key has no message
        """
        if self._translator is None:
            return ""

        if isinstance(value, TranslatableError):
            message = value.translate_error(locale, rule, field)
            if message:
                return message

        key = self._rule_key(rule)

        if isinstance(value, TranslatableField):
            title = value.translate_title(locale, field)
            if title:
                name = title

        return self._translator.plural(locale, key, count, {"field": name, "param": param})

    def _parse_struct_errors(
        self,
        locale: str,
        value: Any,
        err: BaseException | None,
    ) -> ValidationErrors:
        """Translate the engine outcome of a struct validation."""
        if err is None:
            return new_empty_error()

        if not isinstance(err, FieldViolations):
            logger.warning(f"Struct validation failed internally: {err}")
            return new_error(err)

        result = new_empty_error()
        for violation in err:
            param, count = coerce_param(violation.param)

            message = ""
            if self._translator is not None:
                message = self._translate(
                    locale, violation.field, violation.tag,
                    violation.struct_field, param, value, count,
                )
            result.add_error(violation.field, violation.tag, message or violation.error())

        return result

    def _parse_variable_errors(
        self,
        locale: str,
        name: str,
        value: Any,
        err: BaseException | None,
    ) -> ValidationErrors:
        """Translate the engine outcome of a variable validation.

        The caller supplied name is used both as the display name and as the
        structural field name.
        """
        if err is None:
            return new_empty_error()

        if not isinstance(err, FieldViolations):
            logger.warning(f"Validation of '{name}' failed internally: {err}")
            return new_error(err)

        result = new_empty_error()
        for violation in err:
            param, count = coerce_param(violation.param)

            message = ""
            if self._translator is not None:
                message = self._translate(locale, name, violation.tag, name, param, value, count)
            result.add_error(name, violation.tag, message or violation.error())

        return result


def new_validator(*options: "Option", engine: Engine | None = None) -> I18nValidator:
    """Create a validator and apply options in order.

    Args:
        *options: Configuration options (see ``transvalid.options``)
        engine: Engine to use, a fresh one by default

    Returns:
        Configured validator
    """
    validator = I18nValidator(engine)
    for option in options:
        option(validator)
    return validator
