"""Schema Rules — compiles declarative definitions into immutable rule trees.

Invariants:
    - compile_schema() is the only place references are resolved; a compiled
      tree contains no $ref and is never mutated afterwards
    - Cyclic and unknown references, malformed bounds, unknown types and unknown
      formats fail at construction time (SchemaCompileError), never per call
    - Child required-ness is stamped on the child node, so one fragment can be
      required in one place and optional in another

Design Decisions:
    - JSON-Schema-lite input (type/properties/required/items/...): the same
      vocabulary the mobile and admin clients already share
    - Frozen dataclasses + tuples: the tree compares by value
      and is safe to share across concurrent requests
    - Patterns anchored strictly: `$` becomes `\\Z` so a trailing newline
      never slips through, and `\\d` is ASCII-only
"""

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from tripintake.core.domain_types import AdditionalProperties, RuleKind
from tripintake.core.errors import SchemaCompileError
from tripintake.core.normalize_dates import is_calendar_date
from tripintake.core.validation_result import ABSENT

_TYPES = {
    "string": RuleKind.STRING,
    "number": RuleKind.NUMBER,
    "integer": RuleKind.INTEGER,
    "boolean": RuleKind.BOOLEAN,
    "array": RuleKind.ARRAY,
    "object": RuleKind.OBJECT,
}

_URI_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:[^\s]+\Z", re.ASCII)

FORMAT_CHECKS: dict[str, Callable[[str], bool]] = {
    "date": is_calendar_date,
    "uri": lambda v: bool(_URI_RE.match(v)),
}

_TRAILING_DOLLAR = re.compile(r"(?<!\\)\$$")


@dataclass(frozen=True)
class SchemaRule:
    """One node of a compiled rule tree."""
    kind: RuleKind
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None
    min_items: int | None = None
    max_items: int | None = None
    pattern: re.Pattern | None = None
    pattern_source: str | None = None
    format: str | None = None
    choices: tuple | None = None
    items: "SchemaRule | None" = None
    properties: tuple[tuple[str, "SchemaRule"], ...] = ()
    additional: AdditionalProperties = AdditionalProperties.ALLOW
    free_form: bool = False
    default: Any = ABSENT
    ref: str | None = None

    def child(self, name: str) -> "SchemaRule | None":
        for key, rule in self.properties:
            if key == name:
                return rule
        return None


def compile_schema(
    definition: Mapping[str, Any],
    fragments: Mapping[str, Mapping[str, Any]] | None = None,
    *,
    additional: AdditionalProperties = AdditionalProperties.ALLOW,
) -> SchemaRule:
    """Compile a definition, resolving fragment references eagerly.

    `additional` is the default for object rules that do not declare their own
    additionalProperties.
    """
    return _Compiler(fragments or {}, additional).compile(definition, "")


class _Compiler:
    """Single-use compiler: memoizes resolved fragments, tracks the resolution stack."""

    def __init__(
        self,
        fragments: Mapping[str, Mapping[str, Any]],
        additional: AdditionalProperties,
    ):
        self._fragments = fragments
        self._additional = additional
        self._resolved: dict[str, SchemaRule] = {}
        self._resolving: list[str] = []

    def compile(self, definition: Any, path: str) -> SchemaRule:
        if not isinstance(definition, Mapping):
            raise SchemaCompileError("rule definition must be a mapping", path)
        if "$ref" in definition:
            return self._resolve(definition["$ref"], path)

        kind = self._kind(definition, path)
        fields: dict[str, Any] = {"kind": kind}

        if "enum" in definition:
            choices = definition["enum"]
            if not isinstance(choices, (list, tuple)) or not choices:
                raise SchemaCompileError("enum must be a non-empty list", path)
            fields["choices"] = tuple(choices)

        if "default" in definition:
            fields["default"] = definition["default"]

        if kind is RuleKind.STRING:
            fields.update(self._string_fields(definition, path))
        elif kind in (RuleKind.NUMBER, RuleKind.INTEGER):
            fields["minimum"] = _number(definition, "minimum", path)
            fields["maximum"] = _number(definition, "maximum", path)
            _ordered(fields["minimum"], fields["maximum"], "minimum", path)
        elif kind is RuleKind.ARRAY:
            fields["min_items"] = _count(definition, "minItems", path)
            fields["max_items"] = _count(definition, "maxItems", path)
            _ordered(fields["min_items"], fields["max_items"], "minItems", path)
            if "items" in definition:
                fields["items"] = self.compile(definition["items"], f"{path}[]")
        elif kind is RuleKind.OBJECT:
            fields.update(self._object_fields(definition, path))

        return SchemaRule(**fields)

    def _kind(self, definition: Mapping[str, Any], path: str) -> RuleKind:
        declared = definition.get("type")
        if declared is None:
            return RuleKind.ENUM if "enum" in definition else RuleKind.ANY
        if declared not in _TYPES:
            raise SchemaCompileError(f"unknown type {declared!r}", path)
        return _TYPES[declared]

    def _string_fields(self, definition: Mapping[str, Any], path: str) -> dict:
        fields: dict[str, Any] = {
            "min_length": _count(definition, "minLength", path),
            "max_length": _count(definition, "maxLength", path),
        }
        _ordered(fields["min_length"], fields["max_length"], "minLength", path)
        if "pattern" in definition:
            source = definition["pattern"]
            if not isinstance(source, str):
                raise SchemaCompileError("pattern must be a string", path)
            try:
                fields["pattern"] = re.compile(
                    _TRAILING_DOLLAR.sub(r"\\Z", source), re.ASCII,
                )
            except re.error as e:
                raise SchemaCompileError(f"invalid pattern {source!r}: {e}", path)
            fields["pattern_source"] = source
        if "format" in definition:
            fmt = definition["format"]
            if fmt not in FORMAT_CHECKS:
                raise SchemaCompileError(f"unknown format {fmt!r}", path)
            fields["format"] = fmt
        return fields

    def _object_fields(self, definition: Mapping[str, Any], path: str) -> dict:
        declared = definition.get("properties")
        required = definition.get("required", [])
        if declared is not None and not isinstance(declared, Mapping):
            raise SchemaCompileError("properties must be a mapping", path)
        if not isinstance(required, (list, tuple)):
            raise SchemaCompileError("required must be a list", path)

        declared = declared or {}
        properties = []
        for name, child_definition in declared.items():
            child = self.compile(child_definition, _join(path, name))
            if name in required:
                child = replace(child, required=True)
            properties.append((name, child))
        for name in required:
            if name not in declared:
                properties.append((name, SchemaRule(RuleKind.ANY, required=True)))

        return {
            "properties": tuple(properties),
            "additional": _additional(
                definition.get("additionalProperties"), self._additional, path,
            ),
            "free_form": "properties" not in definition and not required,
        }

    def _resolve(self, ref: Any, path: str) -> SchemaRule:
        if not isinstance(ref, str):
            raise SchemaCompileError("$ref must be a fragment id string", path)
        if ref in self._resolved:
            return self._resolved[ref]
        if ref in self._resolving:
            cycle = self._resolving[self._resolving.index(ref):] + [ref]
            raise SchemaCompileError(
                f"cyclic reference: {' -> '.join(cycle)}", path,
            )
        if ref not in self._fragments:
            raise SchemaCompileError(f"unknown fragment {ref!r}", path)

        self._resolving.append(ref)
        try:
            rule = self.compile(self._fragments[ref], path)
        finally:
            self._resolving.pop()
        rule = replace(rule, ref=ref)
        self._resolved[ref] = rule
        return rule


# --- Helpers -----------------------------------------------------------------

def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _number(definition: Mapping[str, Any], key: str, path: str) -> int | float | None:
    value = definition.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaCompileError(f"{key} must be a number", path)
    if isinstance(value, float) and not math.isfinite(value):
        raise SchemaCompileError(f"{key} must be finite", path)
    return value


def _count(definition: Mapping[str, Any], key: str, path: str) -> int | None:
    value = definition.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaCompileError(f"{key} must be a non-negative integer", path)
    return value


def _ordered(low: Any, high: Any, key: str, path: str) -> None:
    if low is not None and high is not None and low > high:
        raise SchemaCompileError(f"{key} exceeds its upper bound", path)


def _additional(
    declared: Any, fallback: AdditionalProperties, path: str,
) -> AdditionalProperties:
    if declared is None:
        return fallback
    if declared is True:
        return AdditionalProperties.ALLOW
    if declared is False:
        return AdditionalProperties.FORBID
    try:
        return AdditionalProperties(declared)
    except ValueError:
        raise SchemaCompileError(
            "additionalProperties must be allow, drop, forbid or a boolean", path,
        )
