"""Rule evaluation over dataclass instances and single variables.

Struct rules live in dataclass field metadata under the ``validate`` key:

    @dataclass
    class Signup:
        name: str = field(metadata={"validate": "required,min=3"})
        email: str = field(metadata={"validate": "required,email"})

pydantic runs the checks. The rules are compiled into annotations (see
``transvalid.engine.schema``). A struct becomes a model with one field per
validated attribute and a variable becomes a ``TypeAdapter``. Compiled
models and adapters are cached per engine by value type and rule
expression.

Every entry point returns None when all rules pass. Otherwise it raises
``FieldViolations`` built from ``ValidationError.errors()``. Misuse (unknown
rules, malformed parameters, non-dataclass targets) raises another
``EngineError``.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Iterator, Mapping

from pydantic import BaseModel, TypeAdapter, ValidationError, create_model

from transvalid.engine.errors import (
    FieldViolation,
    FieldViolations,
    InvalidValidationError,
    RuleExecutionError,
)
from transvalid.engine.parser import OMIT_EMPTY_TAG, SKIP_TAG, RuleSpec, parse_rules
from transvalid.engine.rules import MISSING, BUILTIN_RULES, RuleFunc, is_empty
from transvalid.engine.schema import (
    CONSTRAINT_RULES,
    SCOPE_CONTEXT_KEY,
    FieldRef,
    FieldSchema,
    ValidationScope,
    build_field_schema,
)


logger = logging.getLogger("transvalid.engine")

RULES_METADATA_KEY = "validate"

TagNameFunc = Callable[[dataclasses.Field], str]

# Target key of a variable; a TypeAdapter reports an empty error location
_VAR_KEY = ""


def _active_rules(specs: tuple[RuleSpec, ...], value: Any) -> tuple[RuleSpec, ...]:
    """Rules to run on value; none when ``omitempty`` skips an empty value."""
    if not any(spec.tag == OMIT_EMPTY_TAG for spec in specs):
        return specs
    if is_empty(value):
        return ()
    return tuple(spec for spec in specs if spec.tag != OMIT_EMPTY_TAG)


class Engine:
    """Validation engine with a per-instance rule registry.

    Example:
        engine = Engine()
        engine.register_validation("even", lambda fl: fl.field % 2 == 0)
        engine.var(3, "required,even")  # raises FieldViolations
    """

    def __init__(self) -> None:
        self._rules: dict[str, RuleFunc] = dict(BUILTIN_RULES)
        self._tag_name_func: TagNameFunc | None = None
        self._models: dict[tuple, tuple[type[BaseModel], dict[str, FieldSchema]]] = {}
        self._adapters: dict[tuple, tuple[TypeAdapter, FieldSchema]] = {}

    def register_validation(self, tag: str, func: RuleFunc) -> None:
        """Register (or replace) a rule.

        A registered rule also takes precedence over the pydantic constraint
        of the same name.

        Args:
            tag: Rule name used in expressions
            func: Predicate returning True when the value passes

        Raises:
            ValueError: If tag is blank or reserved
        """
        tag = tag.strip()
        if not tag:
            raise ValueError("Rule name cannot be empty")
        if tag in (OMIT_EMPTY_TAG, SKIP_TAG) or "," in tag or "=" in tag:
            raise ValueError(f"Rule name '{tag}' is reserved or malformed")
        self._rules[tag] = func
        self._models.clear()
        self._adapters.clear()
        logger.debug(f"Registered rule '{tag}'")

    def register_tag_name_func(self, func: TagNameFunc) -> None:
        """Set the function resolving a struct field's display name."""
        self._tag_name_func = func

    def has_rule(self, tag: str) -> bool:
        return tag in self._rules or tag in CONSTRAINT_RULES

    def list_rules(self) -> list[str]:
        return sorted(set(self._rules) | CONSTRAINT_RULES)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def struct(self, value: Any) -> None:
        """Validate every field of a dataclass instance."""
        self._validate_struct(value, lambda path: True)

    def struct_except(self, value: Any, *fields: str) -> None:
        """Validate a dataclass instance, skipping the given field paths."""
        excluded = [f.strip() for f in fields if f.strip()]

        def include(path: str) -> bool:
            return not any(path == f or path.startswith(f + ".") for f in excluded)

        self._validate_struct(value, include)

    def struct_partial(self, value: Any, *fields: str) -> None:
        """Validate only the given field paths of a dataclass instance.

        Listing a nested dataclass field validates it and every field below
        it; listing a nested path such as ``"address.city"`` validates only
        that leaf.
        """
        included = [f.strip() for f in fields if f.strip()]

        def include(path: str) -> bool:
            return any(path == f or path.startswith(f + ".") for f in included)

        self._validate_struct(value, include)

    def var(self, value: Any, rules: str) -> None:
        """Validate a single value against a rule expression."""
        self._validate_var(value, MISSING, rules)

    def var_with_value(self, value: Any, other: Any, rules: str) -> None:
        """Validate a value against a rule expression that compares to other."""
        self._validate_var(value, other, rules)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_var(self, value: Any, other: Any, rules: str) -> None:
        specs = _active_rules(parse_rules(rules), value)
        if not specs:
            return

        adapter, schema = self._adapter_for(value, rules, specs)
        targets = {_VAR_KEY: FieldRef(name="", struct_name="", value=value)}
        scope = ValidationScope(top=value, targets=targets, other=other)
        try:
            adapter.validate_python(value, context={SCOPE_CONTEXT_KEY: scope})
        except ValidationError as exc:
            raise FieldViolations(self._violations(exc, targets, {_VAR_KEY: schema})) from exc

    def _validate_struct(
        self,
        value: Any,
        include: Callable[[str], bool],
    ) -> None:
        if not dataclasses.is_dataclass(value) or isinstance(value, type):
            raise InvalidValidationError(value)

        name = type(value).__name__
        targets: dict[str, FieldRef] = {}
        for ref in self._walk(value, name, name, ""):
            if include(ref.path) and _active_rules(parse_rules(ref.rules), ref.value):
                targets[f"field_{len(targets)}"] = ref
        if not targets:
            return

        model, schemas = self._model_for(name, targets)
        scope = ValidationScope(top=value, targets=targets)
        data = {key: ref.value for key, ref in targets.items()}
        try:
            model.model_validate(data, context={SCOPE_CONTEXT_KEY: scope})
        except ValidationError as exc:
            violations = self._violations(exc, targets, schemas)
            logger.debug(f"{name}: {len(violations)} rule(s) failed")
            raise FieldViolations(violations) from exc

    def _compile(self, key: str, ref: FieldRef) -> FieldSchema:
        specs = _active_rules(parse_rules(ref.rules), ref.value)
        return build_field_schema(key, ref.value, specs, self._rules, ref.struct_name)

    def _adapter_for(
        self,
        value: Any,
        rules: str,
        specs: tuple[RuleSpec, ...],
    ) -> tuple[TypeAdapter, FieldSchema]:
        signature = (type(value), rules)
        cached = self._adapters.get(signature)
        if cached is None:
            schema = build_field_schema(_VAR_KEY, value, specs, self._rules)
            cached = self._adapters[signature] = (TypeAdapter(schema.annotation), schema)
        return cached

    def _model_for(
        self,
        name: str,
        targets: Mapping[str, FieldRef],
    ) -> tuple[type[BaseModel], dict[str, FieldSchema]]:
        signature = (
            name,
            tuple((key, ref.struct_name, type(ref.value), ref.rules) for key, ref in targets.items()),
        )
        cached = self._models.get(signature)
        if cached is None:
            schemas = {key: self._compile(key, ref) for key, ref in targets.items()}
            fields: dict[str, Any] = {key: (schema.annotation, ...) for key, schema in schemas.items()}
            model = create_model(name, **fields)
            cached = self._models[signature] = (model, schemas)
            logger.debug(f"Compiled {len(schemas)} field(s) of {name}")
        return cached

    def _violations(
        self,
        exc: ValidationError,
        targets: Mapping[str, FieldRef],
        schemas: Mapping[str, FieldSchema],
    ) -> list[FieldViolation]:
        """Turn pydantic errors into violation records.

        The first ``loc`` item names the target, ``type`` the rule (a rule
        name for predicates, a pydantic error type for constraints) and
        ``ctx["param"]`` the parameter of a failed predicate.

        Raises:
            RuleExecutionError: For an error no rule accounts for
        """
        violations: list[FieldViolation] = []
        for error in exc.errors(include_url=False):
            key = str(error["loc"][0]) if error["loc"] else _VAR_KEY
            ref = targets[key]
            spec = schemas[key].rule_for(error["type"])
            if spec is None:
                raise RuleExecutionError(ref.struct_name, error["msg"])

            ctx = error.get("ctx") or {}
            violations.append(
                FieldViolation(
                    field=ref.name,
                    struct_field=ref.struct_name,
                    tag=spec.tag,
                    param=str(ctx.get("param", spec.param)),
                    namespace=ref.namespace,
                    struct_namespace=ref.struct_namespace,
                    value=ref.value,
                )
            )
        return violations

    def _display_name(self, f: dataclasses.Field) -> str:
        if self._tag_name_func is not None:
            name = self._tag_name_func(f)
            if name:
                return name
        return f.name

    def _walk(self, obj: Any, namespace: str, struct_namespace: str, prefix: str) -> Iterator[FieldRef]:
        for f in dataclasses.fields(obj):
            rules = f.metadata.get(RULES_METADATA_KEY, "")
            if rules.strip() == SKIP_TAG:
                continue

            name = self._display_name(f)
            value = getattr(obj, f.name)
            path = f"{prefix}{f.name}"
            ref = FieldRef(
                name=name,
                struct_name=f.name,
                value=value,
                parent=obj,
                namespace=f"{namespace}.{name}",
                struct_namespace=f"{struct_namespace}.{f.name}",
                path=path,
                rules=rules,
            )
            yield ref

            if dataclasses.is_dataclass(value) and not isinstance(value, type):
                yield from self._walk(value, ref.namespace, ref.struct_namespace, path + ".")
