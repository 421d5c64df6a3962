"""Tests for the validation engine."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from pydantic import ValidationError

from transvalid.engine import (
    BUILTIN_RULES,
    CONSTRAINT_RULES,
    Engine,
    FieldViolation,
    FieldViolations,
    InvalidValidationError,
    RuleExecutionError,
    RuleSpec,
    RuleSyntaxError,
    UndefinedRuleError,
    UnsupportedTypeError,
    build_field_schema,
    is_empty,
    parse_rules,
)


@dataclass
class Address:
    city: str = field(default="", metadata={"validate": "required"})
    zip_code: str = field(default="", metadata={"validate": "omitempty,len=5"})


@dataclass
class User:
    name: str = field(default="", metadata={"validate": "required,min=3"})
    age: int = field(default=0, metadata={"validate": "gte=18"})
    email: str = field(default="", metadata={"validate": "omitempty,email"})
    address: Address = field(default_factory=Address)
    note: str = field(default="", metadata={"validate": "-"})


@dataclass
class Passwords:
    password: str = field(metadata={"validate": "required"})
    confirm: str = field(metadata={"validate": "eqfield=password"})


def _violations(func, *args) -> list[FieldViolation]:
    with pytest.raises(FieldViolations) as exc_info:
        func(*args)
    return list(exc_info.value)


@pytest.fixture
def engine() -> Engine:
    return Engine()


# =============================================================================
# Rule expressions
# =============================================================================


class TestParseRules:
    """Tests for rule expression parsing."""

    def test_tags_and_params(self):
        assert parse_rules("required,min=3") == (RuleSpec("required"), RuleSpec("min", "3"))

    def test_blank_and_skip(self):
        assert parse_rules("") == ()
        assert parse_rules("-") == ()

    def test_escaped_separators(self):
        assert parse_rules("contains=0x2C,endswith=0x7C") == (
            RuleSpec("contains", ","),
            RuleSpec("endswith", "|"),
        )

    def test_space_separated_param(self):
        assert parse_rules("oneof=red green") == (RuleSpec("oneof", "red green"),)

    @pytest.mark.parametrize("expression", ["required,,min=3", "=3", "omitempty=1", "required,"])
    def test_malformed(self, expression):
        with pytest.raises(RuleSyntaxError):
            parse_rules(expression)


class TestIsEmpty:
    """Zero value detection used by required and omitempty."""

    @pytest.mark.parametrize("value", [None, "", 0, 0.0, False, [], {}, ()])
    def test_empty(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", ["a", 1, -1, True, [0], object()])
    def test_not_empty(self, value):
        assert not is_empty(value)


# =============================================================================
# Variables
# =============================================================================


class TestVar:
    """Tests for single variable validation."""

    def test_passes(self, engine):
        assert engine.var("alice", "required,min=3,max=10") is None

    def test_first_failing_rule_only(self, engine):
        violations = _violations(engine.var, "", "required,min=3")
        assert len(violations) == 1
        assert violations[0].tag == "required"
        assert violations[0].field == ""

    def test_param_reported(self, engine):
        violations = _violations(engine.var, 5, "gt=10")
        assert violations[0].tag == "gt"
        assert violations[0].param == "10"

    def test_numbers_compared_by_value(self, engine):
        assert engine.var(5, "len=5") is None
        assert engine.var(2.5, "gte=2.5,lt=3") is None

    def test_collections_measured_by_length(self, engine):
        assert engine.var([1, 2], "min=2") is None
        _violations(engine.var, [1, 2, 3], "max=2")

    def test_omitempty(self, engine):
        assert engine.var("", "omitempty,email") is None
        assert _violations(engine.var, "bad", "omitempty,email")[0].tag == "email"

    def test_oneof(self, engine):
        assert engine.var("red", "oneof=red green") is None
        assert engine.var(2, "oneof=1 2 3") is None
        _violations(engine.var, "blue", "oneof=red green")

    def test_string_rules(self, engine):
        assert engine.var("a,b", "contains=0x2C") is None
        assert engine.var("prefix-body", "startswith=prefix,endswith=body") is None
        assert engine.var("abc", "alpha") is None
        assert engine.var("abc123", "alphanum") is None
        assert engine.var("-12.5", "numeric") is None
        _violations(engine.var, "1e3", "numeric")

    def test_eq_ne(self, engine):
        assert engine.var("yes", "eq=yes") is None
        assert engine.var(3, "ne=4") is None
        _violations(engine.var, "no", "eq=yes")

    def test_var_with_value(self, engine):
        assert engine.var_with_value("value1", "value1", "eqfield") is None
        violations = _violations(engine.var_with_value, "value1", "value2", "eqfield")
        assert violations[0].tag == "eqfield"

    def test_var_with_value_ordering(self, engine):
        assert engine.var_with_value(5, 3, "gtfield") is None
        assert engine.var_with_value("ab", "abc", "ltfield") is None
        _violations(engine.var_with_value, 1, 3, "gtfield")

    def test_undefined_rule(self, engine):
        with pytest.raises(UndefinedRuleError, match="'nope'"):
            engine.var("x", "nope")

    def test_non_numeric_param(self, engine):
        with pytest.raises(RuleSyntaxError):
            engine.var("x", "min=abc")

    def test_unsupported_type(self, engine):
        with pytest.raises(UnsupportedTypeError):
            engine.var(3, "email")
        with pytest.raises(UnsupportedTypeError):
            engine.var(True, "min=1")

    def test_exclusive_length_bounds(self, engine):
        assert engine.var("ab", "lt=3") is None
        assert engine.var("abc", "gt=2") is None
        assert _violations(engine.var, "abc", "lt=3")[0].tag == "lt"
        assert _violations(engine.var, "ab", "gt=2")[0].tag == "gt"

    def test_trailing_newline_fails_format_rules(self, engine):
        assert _violations(engine.var, "abc\n", "alpha")[0].tag == "alpha"
        assert _violations(engine.var, "12\n", "numeric")[0].tag == "numeric"
        assert _violations(engine.var, "a@b.io\n", "email")[0].tag == "email"

    def test_violations_are_engine_errors_not_internal(self, engine):
        with pytest.raises(FieldViolations) as exc_info:
            engine.var("", "required")
        assert "failed on the 'required' tag" in str(exc_info.value)


# =============================================================================
# Structs
# =============================================================================


class TestStruct:
    """Tests for dataclass validation."""

    def test_collects_every_field(self, engine):
        violations = _violations(engine.struct, User(name="Al", age=20))

        assert [(v.field, v.tag) for v in violations] == [("name", "min"), ("city", "required")]

    def test_namespaces(self, engine):
        violations = _violations(engine.struct, User(name="Al", age=20))

        assert violations[0].namespace == "User.name"
        assert violations[1].namespace == "User.address.city"
        assert violations[1].struct_namespace == "User.address.city"
        assert violations[1].struct_field == "city"

    def test_violation_carries_value(self, engine):
        violations = _violations(engine.struct, User(name="Al", age=20, address=Address(city="Tehran")))
        assert violations[0].value == "Al"
        assert violations[0].param == "3"

    def test_skip_tag(self, engine):
        user = User(name="alice", age=30, address=Address(city="Tehran"), note="")
        assert engine.struct(user) is None

    def test_omitempty_nested(self, engine):
        address = Address(city="Tehran", zip_code="123")
        violations = _violations(engine.struct, User(name="alice", age=30, address=address))
        assert [(v.field, v.tag) for v in violations] == [("zip_code", "len")]

    def test_eqfield(self, engine):
        violations = _violations(engine.struct, Passwords(password="a", confirm="b"))
        assert violations[0].field == "confirm"
        assert violations[0].param == "password"
        assert engine.struct(Passwords(password="a", confirm="a")) is None

    def test_struct_except(self, engine):
        user = User(name="Al", age=20)
        assert [v.field for v in _violations(engine.struct_except, user, "name")] == ["city"]
        assert [v.field for v in _violations(engine.struct_except, user, "address")] == ["name"]

    def test_struct_partial(self, engine):
        user = User(name="Al", age=10)
        assert [v.field for v in _violations(engine.struct_partial, user, "name")] == ["name"]
        assert [v.field for v in _violations(engine.struct_partial, user, "address.city")] == ["city"]
        assert engine.struct_partial(user, "email") is None

    def test_not_a_dataclass(self, engine):
        with pytest.raises(InvalidValidationError):
            engine.struct("not a struct")

    def test_dataclass_type_rejected(self, engine):
        with pytest.raises(InvalidValidationError):
            engine.struct(User)

    def test_tag_name_func(self, engine):
        @dataclass
        class Form:
            user_name: str = field(default="", metadata={"validate": "required", "json": "userName"})

        engine.register_tag_name_func(lambda f: f.metadata.get("json", ""))
        violations = _violations(engine.struct, Form())

        assert violations[0].field == "userName"
        assert violations[0].struct_field == "user_name"
        assert violations[0].namespace == "Form.userName"
        assert violations[0].struct_namespace == "Form.user_name"


class TestRegistry:
    """Tests for custom rule registration."""

    def test_register_validation(self, engine):
        engine.register_validation("even", lambda fl: fl.field % 2 == 0)

        assert engine.has_rule("even")
        assert engine.var(4, "even") is None
        _violations(engine.var, 3, "even")

    def test_custom_rule_sees_param(self, engine):
        engine.register_validation("divisible", lambda fl: fl.field % int(fl.param) == 0)
        assert engine.var(9, "divisible=3") is None

    def test_replace_builtin(self, engine):
        engine.register_validation("required", lambda fl: True)
        assert engine.var("", "required") is None

    @pytest.mark.parametrize("tag", ["", "  ", "omitempty", "-", "a,b", "a=b"])
    def test_invalid_names(self, engine, tag):
        with pytest.raises(ValueError):
            engine.register_validation(tag, lambda fl: True)

    def test_registries_are_independent(self):
        first, second = Engine(), Engine()
        first.register_validation("even", lambda fl: True)
        assert not second.has_rule("even")

    def test_list_rules(self, engine):
        rules = engine.list_rules()
        assert "required" in rules
        assert "min" in rules
        assert "email" in rules
        assert rules == sorted(rules)

    def test_reregistering_replaces_compiled_rule(self, engine):
        engine.register_validation("even", lambda fl: fl.field % 2 == 0)
        _violations(engine.var, 3, "even")

        engine.register_validation("even", lambda fl: True)
        assert engine.var(3, "even") is None

    def test_rule_can_shadow_constraint(self, engine):
        engine.register_validation("min", lambda fl: True)
        assert engine.var("", "min=3") is None


class TestFieldViolation:
    """Tests for violation records."""

    def test_default_message(self):
        violation = FieldViolation(field="Name", struct_field="Name", tag="required", namespace="User.Name")
        assert violation.error() == (
            "Key: 'User.Name' Error:Field validation for 'Name' failed on the 'required' tag"
        )


# =============================================================================
# pydantic compilation
# =============================================================================


class TestFieldSchema:
    """Rule expressions compiled into pydantic annotations."""

    def test_error_types_map_back_to_rules(self):
        schema = build_field_schema("k", "x", parse_rules("required,min=3,email"), BUILTIN_RULES)

        assert schema.rule_for("required") == RuleSpec("required")
        assert schema.rule_for("string_too_short") == RuleSpec("min", "3")
        assert schema.rule_for("string_pattern_mismatch") == RuleSpec("email")
        assert schema.rule_for("too_short") is None

    def test_collection_error_types(self):
        schema = build_field_schema("k", [1], parse_rules("max=2"), BUILTIN_RULES)
        assert schema.rule_for("too_long") == RuleSpec("max", "2")

    def test_number_error_types(self):
        schema = build_field_schema("k", 5, parse_rules("gt=1,lte=9"), BUILTIN_RULES)

        assert schema.rule_for("greater_than") == RuleSpec("gt", "1")
        assert schema.rule_for("less_than_equal") == RuleSpec("lte", "9")

    def test_constraint_rules_are_not_predicates(self):
        assert not CONSTRAINT_RULES & set(BUILTIN_RULES)

    def test_conflicting_constraints(self):
        with pytest.raises(RuleSyntaxError, match="min_length"):
            build_field_schema("k", "x", parse_rules("min=3,gte=2"), BUILTIN_RULES)

    def test_length_must_be_integer(self):
        with pytest.raises(RuleSyntaxError):
            build_field_schema("k", "x", parse_rules("min=1.5"), BUILTIN_RULES)

    def test_undefined_rule_names_field(self):
        with pytest.raises(UndefinedRuleError, match="'title'"):
            build_field_schema("k", "x", parse_rules("nope"), BUILTIN_RULES, "title")


class TestPydanticValidation:
    """Violations come from pydantic's ValidationError."""

    def test_violations_chain_the_validation_error(self, engine):
        with pytest.raises(FieldViolations) as exc_info:
            engine.var("ab", "min=3")
        assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_struct_violations_chain_the_validation_error(self, engine):
        with pytest.raises(FieldViolations) as exc_info:
            engine.struct(User(name="Al", age=20))

        cause = exc_info.value.__cause__
        assert isinstance(cause, ValidationError)
        assert cause.error_count() == 2

    def test_float_bound_on_integer(self, engine):
        assert engine.var(2, "min=1.5") is None
        assert _violations(engine.var, 1, "min=1.5")[0].param == "1.5"

    def test_predicates_keep_expression_order(self, engine):
        calls = []

        def mark(fl):
            calls.append(fl.param)
            return True

        engine.register_validation("mark", mark)

        _violations(engine.var, "ab", "mark=before,min=3,mark=after")
        assert calls == ["before"]

        calls.clear()
        assert engine.var("abc", "mark=before,min=3,mark=after") is None
        assert calls == ["before", "after"]

    def test_predicate_sees_original_value(self, engine):
        seen = []
        engine.register_validation("spy", lambda fl: seen.append(fl.field) or True)

        engine.var(1, "gte=0.5,spy")
        assert seen == [1]
        assert isinstance(seen[0], int)

    def test_failing_predicate_reports_its_param(self, engine):
        violations = _violations(engine.var, "abc", "contains=a,contains=z")
        assert violations[0].tag == "contains"
        assert violations[0].param == "z"

    def test_value_error_in_rule_is_engine_error(self, engine):
        engine.register_validation("digits", lambda fl: int(fl.field) > 0)
        with pytest.raises(RuleExecutionError):
            engine.var("abc", "digits")

    def test_compiled_model_is_reused(self, engine):
        engine.struct(User(name="alice", age=30, address=Address(city="Tehran")))
        compiled = len(engine._models)

        engine.struct(User(name="bob", age=40, address=Address(city="Shiraz")))
        assert len(engine._models) == compiled
