"""Submission Assembly — merges validated, normalized fields into the persisted record shapes.

Invariants:
    - All functions are PURE: timestamps and identities are passed in, never read
    - Clamping is lenient by design and applies ONLY to CLAMPED_FIELDS; every
      other bound is enforced strictly by the rule tree
    - Strings are trimmed and stripped of markup characters before persistence
    - An assembled trip always has at least one destination

Design Decisions:
    - Markup stripping over escaping: records are rendered by several clients,
      none of which should ever see < > " ' & in user text (ADR: store clean text)
    - Zero or unparseable clamp input falls back to the field default before
      clamping, matching the mobile client's "unset means default" behaviour
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tripintake.core.domain_types import CanonicalDate, Identity, TripStatus
from tripintake.core.errors import StructuralValidationError
from tripintake.core.validation_result import FieldError

_MARKUP_CHARS = re.compile(r"[<>\"'&]")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_TRAVEL_STYLE = "Comfortable"


@dataclass(frozen=True)
class ClampRange:
    low: int
    high: int
    default: int


CLAMPED_FIELDS: dict[str, ClampRange] = {
    "groupSize": ClampRange(1, 20, 1),
    "minTripLength": ClampRange(1, 90, 1),
    "maxTripLength": ClampRange(1, 90, 14),
}


@dataclass(frozen=True)
class TripDates:
    """Normalized instants for one trip submission."""
    start: CanonicalDate
    end: CanonicalDate
    earliest_start: CanonicalDate | None = None
    latest_end: CanonicalDate | None = None


# --- Field helpers --------------------------------------------------------------

def sanitize_string(value: Any) -> Any:
    """Trim and strip markup characters. Non-strings pass through unchanged."""
    if not isinstance(value, str):
        return value
    return _MARKUP_CHARS.sub("", value.strip())


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def clamp_field(name: str, value: Any) -> int:
    """Coerce an allow-listed numeric field into its declared range."""
    bounds = CLAMPED_FIELDS[name]
    number = _as_int(value)
    if not number:
        number = bounds.default
    return max(bounds.low, min(bounds.high, number))


def clamp_group_size(value: Any) -> int:
    return clamp_field("groupSize", value)


def _text_or_none(value: Any) -> Any:
    return sanitize_string(value) or None


def _clean_list(values: Any) -> list:
    if not isinstance(values, list):
        return []
    return [v for v in (sanitize_string(item) for item in values) if v]


# --- Record shapes --------------------------------------------------------------

def assemble_trip_record(
    envelope: dict[str, Any],
    dates: TripDates,
    identity: Identity,
    now: datetime,
) -> dict[str, Any]:
    """Build the canonical trip document from a screened envelope.

    Raises StructuralValidationError when sanitization leaves no destination.
    """
    if "destinations" in envelope:
        destinations = _clean_list(envelope["destinations"])
    elif envelope.get("destination"):
        destinations = _clean_list([envelope["destination"]])
    else:
        destinations = []
    if not destinations:
        raise StructuralValidationError((FieldError(
            "destinations", "must contain at least one non-empty destination",
            "minItems", envelope.get("destinations"),
        ),))

    flexible = envelope.get("flexibleDates") is True
    record: dict[str, Any] = {
        "userId": identity,
        "destination": sanitize_string(envelope.get("destination")) or destinations[0],
        "destinations": destinations,
        "departureLocation": _text_or_none(envelope.get("departureLocation")),
        "startDate": dates.start,
        "endDate": dates.end,
        "paymentMethod": envelope.get("paymentMethod") or None,
        "flexibleDates": flexible,
        "status": TripStatus.PENDING.value,
        "createdAt": now,
        "updatedAt": now,
        "budget": _text_or_none(envelope.get("budget")),
        "travelStyle": sanitize_string(envelope.get("travelStyle")) or DEFAULT_TRAVEL_STYLE,
        "groupSize": clamp_group_size(envelope.get("groupSize")),
        "specialRequests": sanitize_string(envelope.get("specialRequests")) or "",
        "interests": _clean_list(envelope.get("interests")),
        "flightClass": envelope.get("flightClass") or None,
        "tripDuration": envelope.get("tripDuration") or None,
    }

    if flexible:
        if dates.earliest_start is not None:
            record["earliestStartDate"] = dates.earliest_start
        if dates.latest_end is not None:
            record["latestEndDate"] = dates.latest_end
        record["minTripLength"] = clamp_field("minTripLength", envelope.get("minTripLength"))
        record["maxTripLength"] = clamp_field("maxTripLength", envelope.get("maxTripLength"))

    return record


def assemble_completion_update(
    recommendation: dict[str, Any],
    completed_by: Identity,
    now: datetime,
) -> dict[str, Any]:
    """Partial update that moves a trip to its terminal completed state."""
    return {
        "status": TripStatus.COMPLETED.value,
        "recommendation": recommendation,
        "updatedAt": now,
        "completedBy": completed_by,
        "completedAt": now,
    }
