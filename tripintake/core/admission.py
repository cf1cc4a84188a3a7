"""Admission Decision — pure per-identity daily counter logic.

Invariants:
    - decide_admission() is PURE: the caller reads and writes the record
    - "Today" is the calendar day of `now` in the reference timezone
    - A record from an earlier day restarts the count at 1
    - Same day: reject once the stored count has reached the ceiling, BEFORE any
      increment is committed; otherwise increment by exactly 1
    - A rejected identity is admitted again only after today rolls over

Design Decisions:
    - Record parsing is lenient: a damaged document never locks a user out, it
      reads as a fresh counter (ADR: the counter is advisory state, not a ledger)
    - Calendar day stored as YYYY-MM-DD, not an instant, so the reset boundary
      never depends on how the store renders timestamps
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any

from tripintake.core.domain_types import DAILY_SUBMISSION_CEILING


@dataclass(frozen=True)
class RateLimitRecord:
    """Per-identity counter state as stored in the rate-limit collection."""
    last_submission_date: date | None = None
    submission_count: int = 0

    @classmethod
    def from_document(cls, document: dict[str, Any] | None) -> "RateLimitRecord":
        """Read a stored document. Absence is an implicit zero-count record."""
        if not document:
            return cls()
        count = document.get("submissionCount")
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            count = 0
        return cls(_parse_day(document.get("lastSubmissionDate")), count)

    def to_document(self) -> dict[str, Any]:
        return {
            "lastSubmissionDate": (
                self.last_submission_date.isoformat()
                if self.last_submission_date else None
            ),
            "submissionCount": self.submission_count,
        }


def _parse_day(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class Admit:
    """Submission admitted; `record` is the state to write back."""
    record: RateLimitRecord


@dataclass(frozen=True)
class Reject:
    """Daily ceiling reached; admission reopens on `resets_on`."""
    resets_on: date
    retry_after_seconds: int
    count: int


AdmissionDecision = Admit | Reject


def calendar_day(now: datetime, tz: tzinfo) -> date:
    """Truncate an aware instant to its calendar day in `tz`."""
    return now.astimezone(tz).date()


def seconds_until_next_day(now: datetime, tz: tzinfo) -> int:
    """Whole seconds (rounded up, at least 1) until the next midnight in `tz`."""
    local = now.astimezone(tz)
    midnight = datetime.combine(local.date() + timedelta(days=1), time(), tzinfo=tz)
    remaining = (midnight.astimezone(timezone.utc) - now).total_seconds()
    return max(1, math.ceil(remaining))


def decide_admission(
    record: RateLimitRecord,
    now: datetime,
    tz: tzinfo,
    ceiling: int = DAILY_SUBMISSION_CEILING,
) -> AdmissionDecision:
    """Admit with the next record, or reject until the day rolls over."""
    today = calendar_day(now, tz)
    if record.last_submission_date != today:
        return Admit(RateLimitRecord(today, 1))
    if record.submission_count >= ceiling:
        return Reject(
            resets_on=today + timedelta(days=1),
            retry_after_seconds=seconds_until_next_day(now, tz),
            count=record.submission_count,
        )
    return Admit(RateLimitRecord(today, record.submission_count + 1))
