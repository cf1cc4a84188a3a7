"""Schema Validator — walks an envelope against a compiled rule tree, collecting every violation.

Invariants:
    - validate() is PURE and TOTAL: no IO, no mutation of the envelope or the
      rule tree, and no exception for any input shape
    - Not fail-fast: every violated rule across the document is reported in one pass
    - Errors come out in schema-declaration order (array items by index), so the
      same invalid input always yields the same error list
    - A value that fails its type check gets one `type` error; its other
      constraints are skipped
    - Numeric bounds are inclusive; range errors cite the bound and the value

Design Decisions:
    - Returns Valid(copy) rather than a bool: the copy carries declared defaults
      and has drop-mode extras pruned, so callers never touch the raw envelope again
    - Opaque subtrees (free-form objects, `any` rules, allowed extras) are shared
      with the envelope, not deep-copied: nothing downstream mutates them and
      copying adversarially deep input could exhaust the stack
"""

import copy
import math
from collections.abc import Mapping
from typing import Any

from tripintake.core.domain_types import AdditionalProperties, RuleKind
from tripintake.core.schema_rules import FORMAT_CHECKS, SchemaRule
from tripintake.core.validation_result import (
    ABSENT, FieldError, ValidationResult, result_from,
)


def validate(rule: SchemaRule, envelope: Any) -> ValidationResult:
    """Validate an envelope. Returns Valid(validated_copy) or Invalid(errors)."""
    errors: list[FieldError] = []
    value = _check(rule, envelope, "", errors)
    return result_from(errors, value)


def _check(rule: SchemaRule, value: Any, path: str, errors: list[FieldError]) -> Any:
    if not _type_matches(rule.kind, value):
        errors.append(FieldError(path, f"must be {rule.kind.value}", "type", value))
        return value

    if rule.choices is not None and not any(_same(value, c) for c in rule.choices):
        allowed = ", ".join(str(c) for c in rule.choices)
        errors.append(FieldError(
            path, f"must be equal to one of the allowed values: {allowed}", "enum", value,
        ))

    if rule.kind is RuleKind.STRING:
        _check_string(rule, value, path, errors)
    elif rule.kind in (RuleKind.NUMBER, RuleKind.INTEGER):
        _check_range(rule, value, path, errors)
    elif rule.kind is RuleKind.ARRAY:
        return _check_array(rule, value, path, errors)
    elif rule.kind is RuleKind.OBJECT:
        return _check_object(rule, value, path, errors)
    return value


# --- Type conformance ----------------------------------------------------------

def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _type_matches(kind: RuleKind, value: Any) -> bool:
    if kind is RuleKind.STRING:
        return isinstance(value, str)
    if kind is RuleKind.BOOLEAN:
        return isinstance(value, bool)
    if kind is RuleKind.NUMBER:
        return _is_number(value)
    if kind is RuleKind.INTEGER:
        return _is_number(value) and (isinstance(value, int) or value.is_integer())
    if kind is RuleKind.ARRAY:
        return isinstance(value, (list, tuple))
    if kind is RuleKind.OBJECT:
        return isinstance(value, Mapping)
    return True  # ENUM and ANY constrain by value, not type


def _same(value: Any, choice: Any) -> bool:
    """JSON equality: booleans never equal numbers."""
    if isinstance(value, bool) or isinstance(choice, bool):
        return isinstance(value, bool) and isinstance(choice, bool) and value == choice
    return value == choice


# --- Scalar constraints --------------------------------------------------------

def _check_string(rule: SchemaRule, value: str, path: str, errors: list[FieldError]) -> None:
    length = len(value)
    if rule.min_length is not None and length < rule.min_length:
        errors.append(FieldError(
            path, f"must NOT have fewer than {rule.min_length} characters", "minLength", value,
        ))
    if rule.max_length is not None and length > rule.max_length:
        errors.append(FieldError(
            path, f"must NOT have more than {rule.max_length} characters", "maxLength", value,
        ))
    if rule.pattern is not None and not rule.pattern.search(value):
        errors.append(FieldError(
            path, f'must match pattern "{rule.pattern_source}"', "pattern", value,
        ))
    if rule.format is not None and not FORMAT_CHECKS[rule.format](value):
        errors.append(FieldError(
            path, f'must match format "{rule.format}"', "format", value,
        ))


def _display_number(value: int | float) -> str:
    try:
        return str(value)
    except ValueError:
        # int past the interpreter's digit limit for str()
        return f"an integer of ~{int(value.bit_length() * math.log10(2)) + 1} digits"


def _check_range(rule: SchemaRule, value: int | float, path: str, errors: list[FieldError]) -> None:
    if rule.minimum is not None and value < rule.minimum:
        errors.append(FieldError(
            path, f"must be >= {rule.minimum}, got {_display_number(value)}", "minimum", value,
        ))
    if rule.maximum is not None and value > rule.maximum:
        errors.append(FieldError(
            path, f"must be <= {rule.maximum}, got {_display_number(value)}", "maximum", value,
        ))


# --- Containers ----------------------------------------------------------------

def _check_array(rule: SchemaRule, value: list | tuple, path: str, errors: list[FieldError]) -> list:
    count = len(value)
    if rule.min_items is not None and count < rule.min_items:
        errors.append(FieldError(
            path, f"must NOT have fewer than {rule.min_items} items, got {count}",
            "minItems", value,
        ))
    if rule.max_items is not None and count > rule.max_items:
        errors.append(FieldError(
            path, f"must NOT have more than {rule.max_items} items, got {count}",
            "maxItems", value,
        ))
    if rule.items is None:
        return list(value)
    return [
        _check(rule.items, item, f"{path}[{index}]", errors)
        for index, item in enumerate(value)
    ]


def _check_object(rule: SchemaRule, value: Mapping, path: str, errors: list[FieldError]) -> dict:
    if rule.free_form:
        return dict(value)

    out: dict[str, Any] = {}
    for name, child in rule.properties:
        child_path = _join(path, name)
        if name not in value:
            if child.required:
                errors.append(FieldError(
                    child_path, f"must have required property '{name}'", "required",
                ))
            elif child.default is not ABSENT:
                out[name] = copy.deepcopy(child.default)
            continue
        out[name] = _check(child, value[name], child_path, errors)

    if rule.additional is AdditionalProperties.DROP:
        return out
    for name, extra in value.items():
        if rule.child(name) is not None:
            continue
        if rule.additional is AdditionalProperties.ALLOW:
            out[name] = extra
        else:
            errors.append(FieldError(
                _join(path, str(name)), "must NOT have additional properties",
                "additionalProperties", extra,
            ))
    return out


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name
