"""Submission Screening — chains structural, cross-field and date checks into one verdict.

Invariants:
    - Order is fixed: rule tree, then cross-field rules, then date normalization
    - Cross-field rules only ever see envelopes the rule tree accepted
    - First failing STAGE wins; within a stage every error is reported
    - Returns the validated copy; the raw envelope is never touched again

Design Decisions:
    - Raises typed IntakeErrors instead of returning results: the shell maps them
      straight to HTTP through the global handler (ADR: uniform error shape)
"""

from typing import Any

from tripintake.core.assemble_submission import TripDates
from tripintake.core.enforce_dates import evaluate_recommendation, evaluate_trip
from tripintake.core.errors import (
    CrossFieldValidationError, DateParseError, StructuralValidationError,
)
from tripintake.core.normalize_dates import normalize
from tripintake.core.schema_validator import validate
from tripintake.core.trip_schemas import RECOMMENDATION_RULES, TRIP_SUBMISSION_RULES
from tripintake.core.validation_result import Invalid


def screen_trip_submission(envelope: Any) -> dict[str, Any]:
    """Structural + cross-field screening of a trip submission."""
    structural = validate(TRIP_SUBMISSION_RULES, envelope)
    if isinstance(structural, Invalid):
        raise StructuralValidationError(structural.errors)
    cleaned = structural.value
    cross = evaluate_trip(cleaned)
    if isinstance(cross, Invalid):
        raise CrossFieldValidationError(cross.errors)
    return cleaned


def screen_recommendation(payload: Any) -> dict[str, Any]:
    """Structural + cross-field screening of a staff recommendation."""
    structural = validate(RECOMMENDATION_RULES, payload)
    if isinstance(structural, Invalid):
        raise StructuralValidationError(structural.errors)
    cleaned = structural.value
    cross = evaluate_recommendation(cleaned)
    if isinstance(cross, Invalid):
        raise CrossFieldValidationError(cross.errors)
    return cleaned


def _normalize_field(envelope: dict[str, Any], name: str):
    try:
        return normalize(envelope.get(name))
    except DateParseError as e:
        raise e.for_field(name) from e


def normalize_trip_dates(envelope: dict[str, Any]) -> TripDates:
    """Normalize every date the trip record persists. Raises DateParseError."""
    start = _normalize_field(envelope, "startDate")
    end = _normalize_field(envelope, "endDate")
    if end <= start:
        raise DateParseError(
            envelope.get("endDate"), "End date must be after start date", "endDate",
        )

    earliest = latest = None
    if envelope.get("flexibleDates") is True:
        if envelope.get("earliestStartDate"):
            earliest = _normalize_field(envelope, "earliestStartDate")
        if envelope.get("latestEndDate"):
            latest = _normalize_field(envelope, "latestEndDate")
    return TripDates(start, end, earliest, latest)


def normalize_destination_dates(recommendation: dict[str, Any]) -> None:
    """Check every destination's dates normalize. Raises DateParseError."""
    for index, destination in enumerate(recommendation.get("destinations", [])):
        for name in ("arrivalDate", "departureDate"):
            path = f"destinations[{index}].{name}"
            try:
                normalize(destination.get(name))
            except DateParseError as e:
                raise e.for_field(path) from e
