"""Schema Validator — tests for the pure envelope walker.

Tests cover:
    - Every violation collected in one pass, in declaration order
    - Type errors short-circuit the rest of that field's constraints
    - Inclusive numeric bounds; booleans and non-finite floats are not numbers
    - allow / drop / forbid handling of undeclared fields
    - Defaults applied to the validated copy, input never mutated
    - Totality: any input shape yields a result, never an exception
"""

import copy
import math

import pytest

from tripintake.core.domain_types import AdditionalProperties
from tripintake.core.schema_rules import compile_schema
from tripintake.core.schema_validator import validate
from tripintake.core.validation_result import ABSENT, FieldError, Invalid, Valid


PERSON = compile_schema({
    "type": "object",
    "required": ["name", "age"],
    "properties": {
        "name": {"type": "string", "minLength": 2, "maxLength": 10},
        "age": {"type": "integer", "minimum": 0, "maximum": 130},
        "tags": {"type": "array", "maxItems": 2, "items": {"type": "string"}},
        "vip": {"type": "boolean", "default": False},
    },
})


def _fields(result) -> list[str]:
    return [e.field for e in result.errors]


# ─── Presence and order ──────────────────────────────────────────

def test_valid_envelope_returns_copy_with_defaults():
    envelope = {"name": "Ada", "age": 36}
    result = validate(PERSON, envelope)
    assert result == Valid({"name": "Ada", "age": 36, "vip": False})
    assert envelope == {"name": "Ada", "age": 36}


def test_each_missing_required_field_reported():
    result = validate(PERSON, {})
    assert isinstance(result, Invalid)
    assert result.errors == (
        FieldError("name", "must have required property 'name'", "required"),
        FieldError("age", "must have required property 'age'", "required"),
    )
    assert result.errors[0].value is ABSENT


def test_errors_follow_declaration_order_not_input_order():
    result = validate(PERSON, {"tags": ["a", "b", "c"], "age": -1, "name": "A"})
    assert _fields(result) == ["name", "age", "tags"]


def test_not_fail_fast_across_nested_items():
    result = validate(PERSON, {"name": "Ada", "age": 1, "tags": [1, "ok", 2.5]})
    assert _fields(result) == ["tags", "tags[0]", "tags[2]"]


def test_same_input_same_result():
    envelope = {"name": 7, "age": "x", "tags": "nope"}
    assert validate(PERSON, envelope) == validate(PERSON, envelope)


# ─── Types ───────────────────────────────────────────────────────

def test_type_error_skips_other_constraints():
    rule = compile_schema({"type": "string", "minLength": 3, "pattern": "^a"})
    result = validate(rule, 5)
    assert result.errors == (FieldError("", "must be string", "type", 5),)


@pytest.mark.parametrize("value", [True, False, math.nan, math.inf, "3", None])
def test_integer_rejects_non_numbers(value):
    result = validate(compile_schema({"type": "integer"}), value)
    assert result.errors[0].rule == "type"


def test_integral_float_satisfies_integer():
    assert validate(compile_schema({"type": "integer"}), 2.0).ok
    assert not validate(compile_schema({"type": "integer"}), 2.5).ok


def test_enum_never_matches_bool_against_number():
    rule = compile_schema({"enum": [1, 2]})
    assert validate(rule, 1).ok
    assert validate(rule, True).errors[0].rule == "enum"


@pytest.mark.parametrize("envelope", [None, "text", 12, [1, 2], 3.5, True])
def test_total_on_any_top_level_shape(envelope):
    result = validate(PERSON, envelope)
    assert result.errors == (FieldError("", "must be object", "type", envelope),)


# ─── Bounds ──────────────────────────────────────────────────────

def test_bounds_are_inclusive():
    assert validate(PERSON, {"name": "Al", "age": 0}).ok
    assert validate(PERSON, {"name": "Al", "age": 130}).ok
    assert validate(PERSON, {"name": "A" * 10, "age": 1}).ok


def test_range_error_cites_bound_and_value():
    result = validate(PERSON, {"name": "Ada", "age": 131})
    error = result.errors[0]
    assert error.field == "age"
    assert error.message == "must be <= 130, got 131"
    assert error.value == 131


@pytest.mark.parametrize("sign", [1, -1])
def test_range_error_for_integer_too_long_to_print(sign):
    age = sign * 10**5000
    result = validate(PERSON, {"name": "Ada", "age": age})
    assert isinstance(result, Invalid)
    error = result.errors[0]
    assert error.rule in ("minimum", "maximum")
    assert error.message.endswith("digits")
    assert error.value == age


def test_cardinality_error_cites_count():
    rule = compile_schema({"type": "array", "minItems": 1})
    assert validate(rule, []).errors[0].message == "must NOT have fewer than 1 items, got 0"


def test_pattern_uses_ascii_digits_and_true_end():
    rule = compile_schema({"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}$"})
    assert validate(rule, "2024-06-15").ok
    assert not validate(rule, "2024-06-15\n").ok
    assert not validate(rule, "٢٠٢٤-06-15").ok


def test_uri_format():
    rule = compile_schema({"type": "string", "format": "uri"})
    assert validate(rule, "https://example.com/a?b=1").ok
    assert validate(rule, "not a url").errors[0].rule == "format"


# ─── Undeclared fields ───────────────────────────────────────────

def _shape(mode: AdditionalProperties):
    return compile_schema(
        {"type": "object", "properties": {"a": {"type": "integer"}}},
        additional=mode,
    )


def test_allow_passes_extras_through():
    assert validate(_shape(AdditionalProperties.ALLOW), {"a": 1, "x": 2}) == Valid({"a": 1, "x": 2})


def test_drop_removes_extras_silently():
    assert validate(_shape(AdditionalProperties.DROP), {"a": 1, "x": 2}) == Valid({"a": 1})


def test_forbid_reports_each_extra():
    result = validate(_shape(AdditionalProperties.FORBID), {"a": 1, "x": 2})
    assert result.errors == (
        FieldError("x", "must NOT have additional properties", "additionalProperties", 2),
    )


def test_free_form_object_passes_contents():
    rule = compile_schema({"type": "object"}, additional=AdditionalProperties.DROP)
    assert validate(rule, {"anything": [1]}) == Valid({"anything": [1]})


# ─── Immutability ────────────────────────────────────────────────

def test_default_is_copied_not_shared():
    rule = compile_schema({
        "type": "object",
        "properties": {"prefs": {"type": "array", "default": []}},
    })
    first = validate(rule, {}).value
    first["prefs"].append("mutated")
    assert validate(rule, {}).value == {"prefs": []}


def test_envelope_untouched_in_drop_mode():
    envelope = {"a": 1, "x": {"deep": True}}
    snapshot = copy.deepcopy(envelope)
    validate(_shape(AdditionalProperties.DROP), envelope)
    assert envelope == snapshot
