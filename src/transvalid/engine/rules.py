"""Built-in predicate rules.

Each rule is a predicate over a ``FieldLevel`` and returns True when the value
passes. Length, range and format rules are pydantic constraints instead (see
``transvalid.engine.schema``). Comparisons measure sized values (strings,
bytes, collections) by length and numbers by value.
"""

from __future__ import annotations

from collections.abc import Sized
from dataclasses import dataclass, field as dc_field
from typing import Any, Callable

from transvalid.engine.errors import RuleSyntaxError, UnsupportedTypeError
from transvalid.utils import parse_numeric


MISSING = object()


@dataclass(frozen=True)
class FieldLevel:
    """Everything a rule function can see about the field under test.

    Attributes:
        field: The value being validated
        param: Rule parameter, empty when the rule has none
        tag: Name of the rule being evaluated
        field_name: Display name of the field
        struct_field_name: Attribute name of the field
        parent: Object holding the field, None for variables
        top: Root object of the validation call
        other: Comparison value passed to ``var_with_value``
    """
    field: Any
    param: str = ""
    tag: str = ""
    field_name: str = ""
    struct_field_name: str = ""
    parent: Any = None
    top: Any = None
    other: Any = dc_field(default=MISSING)

    @property
    def has_other(self) -> bool:
        return self.other is not MISSING

    def get_struct_field(self, name: str) -> tuple[Any, bool]:
        """Look up a sibling attribute (dotted paths start at the root).

        Returns:
            ``(value, found)``
        """
        target = self.top if "." in name else self.parent
        if target is None:
            return None, False
        for part in name.split("."):
            if not hasattr(target, part):
                return None, False
            target = getattr(target, part)
        return target, True


RuleFunc = Callable[[FieldLevel], bool]


def is_empty(value: Any) -> bool:
    """Check for the zero value of a type."""
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _number_param(fl: FieldLevel) -> float | int:
    number = parse_numeric(fl.param.strip())
    if number is None:
        raise RuleSyntaxError(f"{fl.tag}={fl.param}", "parameter must be numeric")
    return number


def _measure(fl: FieldLevel) -> float | int:
    value = fl.field
    if isinstance(value, bool):
        raise UnsupportedTypeError(fl.tag, value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Sized):
        return len(value)
    raise UnsupportedTypeError(fl.tag, value)


def _as_string(fl: FieldLevel) -> str:
    if not isinstance(fl.field, str):
        raise UnsupportedTypeError(fl.tag, fl.field)
    return fl.field


def _comparison_value(fl: FieldLevel) -> tuple[Any, bool]:
    if fl.has_other:
        return fl.other, True
    return fl.get_struct_field(fl.param.strip())


def _comparable(fl: FieldLevel, a: Any, b: Any) -> tuple[Any, Any]:
    numbers = (int, float)
    if isinstance(a, numbers) and isinstance(b, numbers) and not isinstance(a, bool):
        return a, b
    if isinstance(a, str) and isinstance(b, str):
        return len(a), len(b)
    if isinstance(a, Sized) and isinstance(b, Sized):
        return len(a), len(b)
    raise UnsupportedTypeError(fl.tag, a)


def required(fl: FieldLevel) -> bool:
    return not is_empty(fl.field)


def equal(fl: FieldLevel) -> bool:
    value = fl.field
    if isinstance(value, str):
        return value == fl.param
    if isinstance(value, bool):
        return value == (fl.param.strip().lower() == "true")
    return _measure(fl) == _number_param(fl)


def not_equal(fl: FieldLevel) -> bool:
    return not equal(fl)


def one_of(fl: FieldLevel) -> bool:
    value = fl.field
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise UnsupportedTypeError(fl.tag, value)
    options = fl.param.split()
    if isinstance(value, str):
        return value in options
    return any(parse_numeric(option) == value for option in options)


def contains(fl: FieldLevel) -> bool:
    return fl.param in _as_string(fl)


def starts_with(fl: FieldLevel) -> bool:
    return _as_string(fl).startswith(fl.param)


def ends_with(fl: FieldLevel) -> bool:
    return _as_string(fl).endswith(fl.param)


def equal_field(fl: FieldLevel) -> bool:
    other, found = _comparison_value(fl)
    return found and fl.field == other


def not_equal_field(fl: FieldLevel) -> bool:
    other, found = _comparison_value(fl)
    return not found or fl.field != other


def greater_than_field(fl: FieldLevel) -> bool:
    other, found = _comparison_value(fl)
    if not found:
        return False
    a, b = _comparable(fl, fl.field, other)
    return a > b


def less_than_field(fl: FieldLevel) -> bool:
    other, found = _comparison_value(fl)
    if not found:
        return False
    a, b = _comparable(fl, fl.field, other)
    return a < b


BUILTIN_RULES: dict[str, RuleFunc] = {
    "required": required,
    "eq": equal,
    "ne": not_equal,
    "oneof": one_of,
    "contains": contains,
    "startswith": starts_with,
    "endswith": ends_with,
    "eqfield": equal_field,
    "nefield": not_equal_field,
    "gtfield": greater_than_field,
    "ltfield": less_than_field,
}
