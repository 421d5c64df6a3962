"""Validation engine for dataclass instances and single variables.

The engine compiles rule expressions into pydantic annotations, lets pydantic
validate, and reports failures as ``FieldViolations``; it knows nothing about
locales or translations.
"""

from transvalid.engine.engine import (
    RULES_METADATA_KEY,
    Engine,
    TagNameFunc,
)

from transvalid.engine.errors import (
    EngineError,
    FieldViolation,
    FieldViolations,
    InvalidValidationError,
    RuleExecutionError,
    RuleSyntaxError,
    UndefinedRuleError,
    UnsupportedTypeError,
)

from transvalid.engine.parser import (
    RuleSpec,
    parse_rules,
)

from transvalid.engine.rules import (
    BUILTIN_RULES,
    FieldLevel,
    RuleFunc,
    is_empty,
)

from transvalid.engine.schema import (
    CONSTRAINT_RULES,
    FieldRef,
    FieldSchema,
    build_field_schema,
)

__all__ = [
    # Engine
    "Engine",
    "TagNameFunc",
    "RULES_METADATA_KEY",
    # Errors and violations
    "EngineError",
    "FieldViolation",
    "FieldViolations",
    "InvalidValidationError",
    "RuleExecutionError",
    "RuleSyntaxError",
    "UndefinedRuleError",
    "UnsupportedTypeError",
    # Parsing
    "RuleSpec",
    "parse_rules",
    # Rules
    "BUILTIN_RULES",
    "FieldLevel",
    "RuleFunc",
    "is_empty",
    # pydantic compilation
    "CONSTRAINT_RULES",
    "FieldRef",
    "FieldSchema",
    "build_field_schema",
]
