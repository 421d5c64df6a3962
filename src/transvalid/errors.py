"""Localized validation error aggregate.

A ``ValidationErrors`` instance is what every validation entry point returns.
It holds the translated message for each failed ``(field, rule)`` pair and,
separately, an internal error when the engine itself could not run.

Example:
    errs = validator.var("en", "age", 12, "gte=18")
    if errs.has_internal_error():
        raise errs.internal_error()
    if errs.is_failed_on("age", "gte"):
        print(errs.errors()["age"]["gte"])
"""

from __future__ import annotations

import json


class ValidationErrors:
    """Field -> rule -> message mapping plus an optional internal error.

    A given ``(field, rule)`` pair holds exactly one message; adding the same
    pair again replaces the previous message.
    """

    def __init__(self, internal: BaseException | None = None) -> None:
        self._internal = internal
        self._errors: dict[str, dict[str, str]] = {}

    def has_error(self) -> bool:
        """Check for any validation or internal error."""
        return self._internal is not None or len(self._errors) > 0

    def has_internal_error(self) -> bool:
        """Check for an internal (non validation) error."""
        return self._internal is not None

    def has_validation_errors(self) -> bool:
        """Check for at least one failed field."""
        return len(self._errors) > 0

    def is_failed(self, field: str) -> bool:
        """Check if a field failed on any rule."""
        return field in self._errors

    def is_failed_on(self, field: str, rule: str) -> bool:
        """Check if a field failed on the given rule."""
        return rule in self._errors.get(field, {})

    def internal_error(self) -> BaseException | None:
        """Return the internal error, or None."""
        return self._internal

    def errors(self) -> dict[str, dict[str, str]]:
        """Return a copy of the field -> rule -> message mapping."""
        return {field: dict(rules) for field, rules in self._errors.items()}

    def messages(self) -> dict[str, list[str]]:
        """Return the messages of each failed field."""
        return {field: list(rules.values()) for field, rules in self._errors.items()}

    def rules(self) -> dict[str, list[str]]:
        """Return the failed rule names of each field."""
        return {field: list(rules.keys()) for field, rules in self._errors.items()}

    def add_error(self, field: str, rule: str, message: str | None = None) -> None:
        """Record a message for a field/rule pair, replacing any previous one.

        Args:
            field: Field name
            rule: Rule name
            message: Localized message, blank or missing means empty
        """
        msg = message.strip() if message and message.strip() else ""
        self._errors.setdefault(field, {})[rule] = msg

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Serialize validation errors to a plain dictionary."""
        return self.errors()

    def to_json(self, indent: int | None = None) -> str:
        """Serialize validation errors as ``{field: {rule: message}}`` JSON."""
        return json.dumps(self._errors, ensure_ascii=False, indent=indent)

    def __str__(self) -> str:
        lines: list[str] = []
        for field, rules in self._errors.items():
            lines.append(f"{field}:")
            for rule, message in rules.items():
                lines.append(f"    {rule}: {message}")
        return "".join(line + "\n" for line in lines)

    def __repr__(self) -> str:
        count = sum(len(rules) for rules in self._errors.values())
        return (
            f"ValidationErrors(fields={len(self._errors)}, errors={count}, "
            f"internal={self._internal!r})"
        )


def new_error(err: BaseException) -> ValidationErrors:
    """Create an aggregate carrying only an internal error."""
    return ValidationErrors(internal=err)


def new_empty_error() -> ValidationErrors:
    """Create an empty aggregate."""
    return ValidationErrors()
