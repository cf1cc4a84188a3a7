"""Cross-Field Date Enforcement — ordering rules a structural rule tree cannot express.

Invariants:
    - All functions are PURE: no IO, no async, no mutation of the envelope
    - Only called on envelopes that already passed structural validation
    - End strictly after start: equal dates are rejected
    - Every out-of-order destination is reported, each tagged with its index

Design Decisions:
    - Return FieldError lists (not exceptions): the screening layer decides how to
      raise, so the rules stay trivially testable (ADR: ExMA Functional Core)
    - Dates that do not parse are skipped here; the date normalizer owns that
      failure and reports it as invalid_dates
"""

from collections.abc import Mapping
from typing import Any

from tripintake.core.domain_types import CanonicalDate
from tripintake.core.errors import DateParseError
from tripintake.core.normalize_dates import normalize
from tripintake.core.validation_result import FieldError, ValidationResult, result_from


def _instant(value: Any) -> CanonicalDate | None:
    try:
        return normalize(value)
    except DateParseError:
        return None


def check_date_range(envelope: Mapping[str, Any]) -> FieldError | None:
    """Rule 1: endDate must be strictly after startDate, when both are present.

    Evaluated once per submission; the flexible window fields are stored as
    given and never ordered against each other.
    """
    if "startDate" not in envelope or "endDate" not in envelope:
        return None
    start = _instant(envelope["startDate"])
    end = _instant(envelope["endDate"])
    if start is None or end is None or end > start:
        return None
    return FieldError(
        "endDate", "End date must be after start date", "dateRange", envelope["endDate"],
    )


def check_destination_dates(destinations: Any) -> list[FieldError]:
    """Rule 2: each destination's departure must be strictly after its arrival."""
    if not isinstance(destinations, (list, tuple)):
        return []
    errors = []
    for index, destination in enumerate(destinations):
        if not isinstance(destination, Mapping):
            continue
        arrival = _instant(destination.get("arrivalDate"))
        departure = _instant(destination.get("departureDate"))
        if arrival is None or departure is None or departure > arrival:
            continue
        label = destination.get("cityName") or index + 1
        errors.append(FieldError(
            f"destinations[{index}].departureDate",
            f"Destination {label}: Departure date must be after arrival date",
            "dateRange",
            destination.get("departureDate"),
        ))
    return errors


def evaluate_trip(envelope: Mapping[str, Any]) -> ValidationResult:
    """Cross-field verdict for a trip submission."""
    error = check_date_range(envelope)
    return result_from([error] if error else [], envelope)


def evaluate_recommendation(payload: Mapping[str, Any]) -> ValidationResult:
    """Cross-field verdict for a staff recommendation."""
    return result_from(check_destination_dates(payload.get("destinations")), payload)
