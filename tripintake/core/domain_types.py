"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Identity is the stable uid string yielded by identity verification
    - CanonicalDate is always a timezone-aware instant at 12:00 UTC
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: store values are JSON documents)
"""

from datetime import datetime
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Identity = NewType("Identity", str)
TripId = NewType("TripId", str)


# ─── Value Types ─────────────────────────────────────────────────

CanonicalDate = NewType("CanonicalDate", datetime)  # aware, 12:00 UTC


# ─── Enums ───────────────────────────────────────────────────────

class TripStatus(str, Enum):
    """Trip lifecycle states — the state machine itself lives outside this service."""
    PENDING = "pending"
    COMPLETED = "completed"


class RejectionReason(str, Enum):
    """Machine-readable reason codes carried by every rejection."""
    VALIDATION_FAILED = "validation_failed"
    RATE_LIMITED = "rate_limited"
    INVALID_DATES = "invalid_dates"


class RuleKind(str, Enum):
    """Kinds of compiled schema rule nodes."""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"
    ANY = "any"


class AdditionalProperties(str, Enum):
    """What an object rule does with fields it does not declare."""
    ALLOW = "allow"    # passed through untouched
    DROP = "drop"      # silently removed from the validated copy
    FORBID = "forbid"  # reported as validation errors


# ─── Collections ─────────────────────────────────────────────────

TRIPS_COLLECTION = "trips"
RATE_LIMIT_COLLECTION = "userSubmissions"
USERS_COLLECTION = "users"
USER_POINTS_COLLECTION = "userPoints"


# ─── Limits ──────────────────────────────────────────────────────

MAX_DESTINATIONS = 5
DAILY_SUBMISSION_CEILING = 10
CANONICAL_HOUR_UTC = 12
