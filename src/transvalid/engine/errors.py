"""Engine error types and violation records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator


class EngineError(Exception):
    """Base class for everything the validation engine raises."""


class InvalidValidationError(EngineError):
    """Raised when a value of the wrong kind is passed to an entry point."""

    def __init__(self, value: Any, expected: str = "a dataclass instance"):
        self.value = value
        self.expected = expected
        super().__init__(f"Invalid validation target: expected {expected}, got {type(value).__name__}")


class UndefinedRuleError(EngineError):
    """Raised when a rule expression names an unregistered rule."""

    def __init__(self, tag: str, field: str = ""):
        self.tag = tag
        self.field = field
        message = f"Undefined validation rule '{tag}'"
        if field:
            message += f" on field '{field}'"
        super().__init__(message)


class RuleSyntaxError(EngineError):
    """Raised when a rule expression or a rule parameter is malformed."""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid rule '{expression}': {reason}")


class UnsupportedTypeError(EngineError):
    """Raised when a rule cannot be applied to the value's type."""

    def __init__(self, tag: str, value: Any):
        self.tag = tag
        self.value_type = type(value).__name__
        super().__init__(f"Rule '{tag}' cannot be applied to a value of type {self.value_type}")


class RuleExecutionError(EngineError):
    """Raised when a rule fails with an error instead of a verdict.

    A rule function raising ``ValueError`` or ``AssertionError`` ends up
    here; other exceptions propagate unchanged.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Rule on field '{field}' did not run cleanly: {message}")


@dataclass(frozen=True)
class FieldViolation:
    """A single failed rule.

    Attributes:
        field: Display name of the field (empty for variables)
        struct_field: Attribute name of the field (empty for variables)
        tag: Failed rule name
        param: Rule parameter as written in the expression
        namespace: Display path including the root type name
        struct_namespace: Attribute path including the root type name
        value: The offending value
    """
    field: str
    struct_field: str
    tag: str
    param: str = ""
    namespace: str = ""
    struct_namespace: str = ""
    value: Any = None

    def error(self) -> str:
        """Default English message for this violation."""
        return (
            f"Key: '{self.namespace}' Error:Field validation for "
            f"'{self.field}' failed on the '{self.tag}' tag"
        )


class FieldViolations(EngineError):
    """Raised with every failed rule of one validation call."""

    def __init__(self, violations: list[FieldViolation]):
        self.violations = list(violations)
        super().__init__("\n".join(v.error() for v in self.violations))

    def __iter__(self) -> Iterator[FieldViolation]:
        return iter(self.violations)

    def __len__(self) -> int:
        return len(self.violations)
