"""Validation Result — the verdict shape shared by structural and cross-field checks.

Invariants:
    - A result is either Valid(value) or Invalid(errors), never both
    - Invalid always carries at least one FieldError
    - FieldError.value is ABSENT (not None) when the offending field is missing

Design Decisions:
    - Frozen dataclasses: results compare by value, so re-validating the same
      envelope yields an equal result (ADR: determinism is tested, not assumed)
    - ABSENT sentinel over None: a JSON null is a real offending value
"""

from dataclasses import dataclass
from typing import Any


class _Absent:
    """Marker for a field that was not present in the envelope."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<absent>"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()


@dataclass(frozen=True)
class FieldError:
    """One violated rule: where, what, and the value that broke it."""
    field: str
    message: str
    rule: str
    value: Any = ABSENT

    def to_dict(self) -> dict:
        out = {"field": self.field, "message": self.message, "rule": self.rule}
        if self.value is not ABSENT:
            out["value"] = self.value
        return out


@dataclass(frozen=True)
class Valid:
    """Envelope passed. `value` is the validated copy (defaults applied, extras pruned)."""
    value: Any = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    """Envelope failed. Errors are in schema-declaration order."""
    errors: tuple[FieldError, ...]

    @property
    def ok(self) -> bool:
        return False


ValidationResult = Valid | Invalid


def result_from(errors: list[FieldError], value: Any) -> ValidationResult:
    """Build Invalid when any error was collected, Valid(value) otherwise."""
    if errors:
        return Invalid(tuple(errors))
    return Valid(value)
