"""Rule expressions compiled into pydantic annotations.

The rules of one field become a single ``Annotated`` type that pydantic
validates:

* length, range and format rules (``len``, ``min``, ``max``, ``gt``,
  ``gte``, ``lt``, ``lte``, ``email``, ``alpha``, ``alphanum``, ``numeric``)
  are pydantic constraints (``min_length``, ``ge``, ``pattern``, ...) on the
  type of the value under test;
* every other rule is a ``FieldLevel`` predicate, wrapped in a
  ``BeforeValidator`` when written before the first constraint rule and in an
  ``AfterValidator`` otherwise.

A failing predicate raises ``PydanticCustomError`` whose error type is the
rule name and whose context carries the parameter. Constraint failures keep
pydantic's own error types; ``FieldSchema.error_rules`` maps them back to the
rule that set the constraint.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from typing import Annotated, Any, Callable, Mapping, Sequence

from pydantic import AfterValidator, BeforeValidator, Field, ValidationInfo
from pydantic_core import PydanticCustomError

from transvalid.engine.errors import RuleSyntaxError, UndefinedRuleError, UnsupportedTypeError
from transvalid.engine.parser import RuleSpec
from transvalid.engine.rules import MISSING, FieldLevel, RuleFunc
from transvalid.utils import parse_numeric


# Validation context entry holding the ValidationScope of the current call
SCOPE_CONTEXT_KEY = "transvalid_scope"

EMAIL_PATTERN = (
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

PATTERN_RULES: dict[str, str] = {
    "email": EMAIL_PATTERN,
    "alpha": r"^[a-zA-Z]+$",
    "alphanum": r"^[a-zA-Z0-9]+$",
    "numeric": r"^[-+]?[0-9]+(?:\.[0-9]+)?$",
}

# Rule -> (constraint, offset) for strings, bytes and collections
_LENGTH_BOUNDS: dict[str, tuple[tuple[str, int], ...]] = {
    "len": (("min_length", 0), ("max_length", 0)),
    "min": (("min_length", 0),),
    "gte": (("min_length", 0),),
    "max": (("max_length", 0),),
    "lte": (("max_length", 0),),
    "gt": (("min_length", 1),),
    "lt": (("max_length", -1),),
}

# Rule -> constraints for numbers
_NUMBER_BOUNDS: dict[str, tuple[str, ...]] = {
    "len": ("ge", "le"),
    "min": ("ge",),
    "gte": ("ge",),
    "max": ("le",),
    "lte": ("le",),
    "gt": ("gt",),
    "lt": ("lt",),
}

CONSTRAINT_RULES = frozenset(_LENGTH_BOUNDS) | frozenset(PATTERN_RULES)

# Constraint -> pydantic error type, before the value kind's prefix
_ERROR_TYPES = {
    "min_length": "too_short",
    "max_length": "too_long",
    "ge": "greater_than_equal",
    "le": "less_than_equal",
    "gt": "greater_than",
    "lt": "less_than",
    "pattern": "pattern_mismatch",
}


@dataclass(frozen=True)
class _Kind:
    annotation: Any
    error_prefix: str = ""
    sized: bool = False
    number: bool = False


_SIZED_KINDS: tuple[tuple[type, _Kind], ...] = (
    (str, _Kind(str, "string_", sized=True)),
    (bytes, _Kind(bytes, "bytes_", sized=True)),
    (list, _Kind(list[Any], sized=True)),
    (tuple, _Kind(tuple[Any, ...], sized=True)),
    (set, _Kind(set[Any], sized=True)),
    (frozenset, _Kind(frozenset[Any], sized=True)),
    (dict, _Kind(dict[Any, Any], sized=True)),
)


def _kind_of(value: Any) -> _Kind:
    if isinstance(value, bool):
        return _Kind(bool)
    if isinstance(value, (int, float)):
        return _Kind(float, number=True)
    for cls, kind in _SIZED_KINDS:
        if isinstance(value, cls):
            return kind
    return _Kind(Any)


@dataclass(frozen=True)
class FieldRef:
    """A value under validation and where it lives.

    Attributes:
        name: Display name of the field (empty for variables)
        struct_name: Attribute name of the field (empty for variables)
        value: The value under test
        parent: Object holding the field, None for variables
        namespace: Display path including the root type name
        struct_namespace: Attribute path including the root type name
        path: Attribute path below the root, used by partial validation
        rules: Raw rule expression
    """
    name: str
    struct_name: str
    value: Any
    parent: Any = None
    namespace: str = ""
    struct_namespace: str = ""
    path: str = ""
    rules: str = ""


@dataclass(frozen=True)
class ValidationScope:
    """Per-call state the predicates read from the pydantic context."""
    top: Any
    targets: Mapping[str, FieldRef]
    other: Any = MISSING


@dataclass(frozen=True)
class FieldSchema:
    """The rules of one field compiled for pydantic.

    Attributes:
        annotation: Type handed to pydantic
        error_rules: pydantic error type -> rule raising it
    """
    annotation: Any
    error_rules: dict[str, RuleSpec] = dc_field(default_factory=dict)

    def rule_for(self, error_type: str) -> RuleSpec | None:
        return self.error_rules.get(error_type)


def _predicate(key: str, spec: RuleSpec, func: RuleFunc) -> Callable[[Any, ValidationInfo], Any]:
    def check(value: Any, info: ValidationInfo) -> Any:
        scope: ValidationScope = info.context[SCOPE_CONTEXT_KEY]
        target = scope.targets[key]
        fl = FieldLevel(
            field=target.value,
            param=spec.param,
            tag=spec.tag,
            field_name=target.name,
            struct_field_name=target.struct_name,
            parent=target.parent,
            top=scope.top,
            other=scope.other,
        )
        if not func(fl):
            raise PydanticCustomError(
                spec.tag,
                "Field validation failed on the '{tag}' tag",
                {"tag": spec.tag, "param": spec.param},
            )
        return value

    return check


def _bound(spec: RuleSpec) -> int | float:
    number = parse_numeric(spec.param.strip())
    if number is None:
        raise RuleSyntaxError(f"{spec.tag}={spec.param}", "parameter must be numeric")
    return number


def _constraints(spec: RuleSpec, value: Any, kind: _Kind) -> list[tuple[str, Any]]:
    if spec.tag in PATTERN_RULES:
        if kind.number and spec.tag == "numeric":
            return []
        if kind.annotation is not str:
            raise UnsupportedTypeError(spec.tag, value)
        return [("pattern", PATTERN_RULES[spec.tag])]

    if kind.number:
        number = _bound(spec)
        return [(name, number) for name in _NUMBER_BOUNDS[spec.tag]]

    if not kind.sized:
        raise UnsupportedTypeError(spec.tag, value)

    number = _bound(spec)
    if not isinstance(number, int):
        raise RuleSyntaxError(f"{spec.tag}={spec.param}", "length must be an integer")

    bounds = []
    for name, offset in _LENGTH_BOUNDS[spec.tag]:
        if number + offset < 0:
            raise RuleSyntaxError(f"{spec.tag}={spec.param}", "length cannot be negative")
        bounds.append((name, number + offset))
    return bounds


def build_field_schema(
    key: str,
    value: Any,
    specs: Sequence[RuleSpec],
    predicates: Mapping[str, RuleFunc],
    field_name: str = "",
) -> FieldSchema:
    """Compile the rules of one field.

    Args:
        key: Name of the field in the validated data; predicates use it to
            find their ``FieldRef`` in the ``ValidationScope``
        value: Value under test; its type selects the pydantic type and
            which constraints apply
        specs: Parsed rules without ``omitempty``
        predicates: Registered rule functions by name
        field_name: Attribute name used in error messages

    Returns:
        The compiled ``FieldSchema``

    Raises:
        UndefinedRuleError: If a rule is neither registered nor a constraint
        RuleSyntaxError: If a constraint parameter is malformed, or two rules
            set the same constraint
        UnsupportedTypeError: If a constraint does not apply to the value type
    """
    kind = _kind_of(value)
    before: list[BeforeValidator] = []
    after: list[AfterValidator] = []
    constraints: dict[str, Any] = {}
    error_rules: dict[str, RuleSpec] = {}

    for spec in specs:
        func = predicates.get(spec.tag)
        if func is not None:
            check = _predicate(key, spec, func)
            if constraints or after:
                after.append(AfterValidator(check))
            else:
                before.append(BeforeValidator(check))
            error_rules.setdefault(spec.tag, spec)
            continue

        if spec.tag not in CONSTRAINT_RULES:
            raise UndefinedRuleError(spec.tag, field_name)

        for name, bound in _constraints(spec, value, kind):
            if name in constraints:
                raise RuleSyntaxError(f"{spec.tag}={spec.param}", f"'{name}' is already set by another rule")
            constraints[name] = bound
            error_rules[kind.error_prefix + _ERROR_TYPES[name]] = spec

    annotation = kind.annotation
    if kind.number:
        if isinstance(value, int) and all(isinstance(b, int) for b in constraints.values()):
            annotation = int
        else:
            constraints = {name: float(b) for name, b in constraints.items()}

    metadata: list[Any] = []
    if constraints:
        metadata.append(Field(**constraints))
    # Before validators run outermost first
    metadata.extend(reversed(before))
    metadata.extend(after)

    if metadata:
        annotation = Annotated[(annotation, *metadata)]
    return FieldSchema(annotation=annotation, error_rules=error_rules)
