"""Date Normalization — turns client calendar-date strings into timezone-stable instants.

Invariants:
    - YYYY-MM-DD input is parsed from its integer components, never through a
      locale- or timezone-dependent parser
    - Strict results are anchored at 12:00 UTC: every offset from -12h up to
      (not including) +12h renders the same calendar day back
    - Any other input goes through the legacy fallback; callers cannot tell the
      two paths apart except by the instant returned
    - An impossible calendar date (month 13, Feb 30) is a DateParseError, never a rollover

Design Decisions:
    - Midday anchor over midnight: maximally far from both neighbouring day
      boundaries; no single instant can be the same day across the full
      UTC-12 to UTC+14 span (ADR: server-side day arithmetic stays in UTC)
    - Fallback delegates to pydantic's datetime parser (ISO 8601 variants, unix
      seconds); naive results are read in the server's local zone, a known
      looseness kept only for legacy clients
"""

import re
from datetime import date, datetime, timedelta, timezone, tzinfo

from pydantic import TypeAdapter, ValidationError

from tripintake.core.domain_types import CANONICAL_HOUR_UTC, CanonicalDate
from tripintake.core.errors import DateParseError

CALENDAR_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})\Z", re.ASCII)

_LEGACY_TIMESTAMP = TypeAdapter(datetime)


def is_calendar_date(value: object) -> bool:
    """True for a YYYY-MM-DD string naming a real calendar day."""
    if not isinstance(value, str):
        return False
    match = CALENDAR_DATE_RE.match(value)
    if not match:
        return False
    try:
        date(*(int(g) for g in match.groups()))
    except ValueError:
        return False
    return True


def normalize(date_string: object) -> CanonicalDate:
    """Parse a date string into a CanonicalDate. Raises DateParseError."""
    if not isinstance(date_string, str):
        raise DateParseError(date_string, "expected a date string")
    match = CALENDAR_DATE_RE.match(date_string)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return CanonicalDate(datetime(
                year, month, day, CANONICAL_HOUR_UTC, tzinfo=timezone.utc,
            ))
        except ValueError as e:
            raise DateParseError(date_string, f"not a calendar date ({e})")
    return _parse_legacy(date_string)


def _parse_legacy(date_string: str) -> CanonicalDate:
    """Best-effort general timestamp parsing. Timezone-sensitive for naive input."""
    text = date_string.strip()
    if not text:
        raise DateParseError(date_string, "empty date string")
    try:
        parsed = _LEGACY_TIMESTAMP.validate_python(text)
    except ValidationError as e:
        raise DateParseError(date_string, e.errors()[0]["msg"])
    try:
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()  # server local zone
        return CanonicalDate(parsed.astimezone(timezone.utc))
    except (OverflowError, ValueError) as e:
        raise DateParseError(date_string, f"timestamp out of range ({e})")


def calendar_day_in(instant: datetime, zone: tzinfo | timedelta) -> date:
    """Calendar day of an instant as seen from a zone or a fixed UTC offset."""
    if isinstance(zone, timedelta):
        zone = timezone(zone)
    return instant.astimezone(zone).date()
