"""Notification Message Formatting — pure functions that render trip emails.

Invariants:
    - All functions are pure (no IO, no async, no DB, no clock reads)
    - Every user-supplied value is HTML-escaped before it reaches markup
    - Missing profile data renders a placeholder; formatting never raises on
      a sparse trip document

Design Decisions:
    - Formatting lives in core, sending in the shell: messages are testable
      without a mail provider (ADR: ExMA pure/impure separation)
    - Dates render as calendar days (YYYY-MM-DD) straight from the canonical
      instant, so the day shown is the day the traveller picked
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Any


@dataclass(frozen=True)
class MailMessage:
    """One outbound email, provider-agnostic."""
    to: str
    sender: str
    subject: str
    html: str


@dataclass(frozen=True)
class Profile:
    """Traveller contact details read from the users collection."""
    email: str | None = None
    name: str | None = None

    @classmethod
    def from_document(cls, document: dict[str, Any] | None) -> "Profile":
        if not document:
            return cls()
        return cls(
            email=document.get("email") or None,
            name=document.get("name") or document.get("displayName") or None,
        )


@dataclass(frozen=True)
class PointsBalance:
    """Loyalty balances from the userPoints collection, keyed by provider."""
    credit_card: dict[str, Any] = field(default_factory=dict)
    hotel: dict[str, Any] = field(default_factory=dict)
    airline: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: dict[str, Any] | None) -> "PointsBalance":
        if not document:
            return cls()

        def category(key: str) -> dict[str, Any]:
            value = document.get(key)
            return dict(value) if isinstance(value, dict) else {}

        return cls(
            credit_card=category("creditCardPoints"),
            hotel=category("hotelPoints"),
            airline=category("airlinePoints"),
        )

    @property
    def total(self) -> int | float:
        """Sum over every provider; entries that are not numbers count as 0."""
        return sum(
            _as_points(points)
            for category in (self.credit_card, self.hotel, self.airline)
            for points in category.values()
        )


def _as_points(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value if math.isfinite(value) else 0


def format_points(value: Any) -> str:
    """Thousands-separated balance; non-numeric values are echoed escaped."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _e(value)
    return f"{value:,}"

def _e(value: Any) -> str:
    return escape(str(value), quote=True)


def format_day(value: Any) -> str:
    """Render a stored date (instant or ISO string) as its calendar day."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, str) and len(value) >= 10:
        return value[:10]
    return "Not specified"


def destinations_label(trip: dict[str, Any], fallback: str = "Not specified") -> str:
    destinations = trip.get("destinations") or []
    if destinations:
        return ", ".join(str(d) for d in destinations)
    return trip.get("destination") or fallback


def _plural(count: int, one: str, many: str) -> str:
    return one if count == 1 else many


# --- New trip (to staff) --------------------------------------------------------

_POINT_CATEGORIES = (
    ("credit_card", "Credit Card Points"),
    ("hotel", "Hotel Points"),
    ("airline", "Airline Miles"),
)


def format_points_breakdown(points: PointsBalance) -> list[str]:
    """HTML lines listing each provider balance, one block per category."""
    lines = ["<h3>Points &amp; Miles Breakdown</h3>"]
    for attr, label in _POINT_CATEGORIES:
        category = getattr(points, attr)
        if not category:
            lines.append(f"<p><strong>{label}:</strong> None</p>")
            continue
        lines.append(f"<p><strong>{label}:</strong></p>")
        lines.append("<ul>")
        lines += [
            f"<li>{_e(provider)}: {format_points(balance)} pts</li>"
            for provider, balance in category.items()
        ]
        lines.append("</ul>")
    return lines


def format_new_trip_message(
    trip_id: str,
    trip: dict[str, Any],
    profile: Profile,
    *,
    recipient: str,
    sender: str,
    points: PointsBalance | None = None,
) -> MailMessage:
    """Staff alert for a freshly admitted trip, with the traveller's points balance."""
    if points is None:
        points = PointsBalance()
    total = format_points(points.total)
    group = trip.get("groupSize") or 1
    subject = (
        f"New Trip Request - {trip.get('destination') or destinations_label(trip)} "
        f"({group} {_plural(group, 'traveler', 'travelers')}) - {total} total pts"
    )
    optional = []
    if trip.get("departureLocation"):
        optional.append(f"<p><strong>Departing from:</strong> {_e(trip['departureLocation'])}</p>")
    if trip.get("tripDuration"):
        optional.append(f"<p><strong>Trip Duration:</strong> {_e(trip['tripDuration'])} days</p>")
    if trip.get("flightClass"):
        optional.append(f"<p><strong>Flight Class:</strong> {_e(trip['flightClass'])}</p>")
    if trip.get("specialRequests"):
        optional.append(f"<p><strong>Special Requests:</strong> {_e(trip['specialRequests'])}</p>")

    interests = ", ".join(trip.get("interests") or []) or "None specified"
    html = "\n".join([
        "<h2>New Trip Request</h2>",
        "<h3>Client Info</h3>",
        f"<p><strong>Name:</strong> {_e(profile.name or 'Not available')}</p>",
        f"<p><strong>Email:</strong> {_e(profile.email or 'Not available')}</p>",
        f"<p><strong>Total Points:</strong> {total}</p>",
        f"<p><strong>User ID:</strong> {_e(trip.get('userId', ''))}</p>",
        f"<p><strong>Trip ID:</strong> {_e(trip_id)}</p>",
        *format_points_breakdown(points),
        "<h3>Trip Details</h3>",
        f"<p><strong>Destination(s):</strong> {_e(destinations_label(trip))}</p>",
        f"<p><strong>Dates:</strong> {format_day(trip.get('startDate'))} - "
        f"{format_day(trip.get('endDate'))}</p>",
        f"<p><strong>Flexible Dates:</strong> {'Yes' if trip.get('flexibleDates') else 'No'}</p>",
        f"<p><strong>Payment Method:</strong> {_e(trip.get('paymentMethod') or 'Not specified')}</p>",
        "<h3>Client Preferences</h3>",
        f"<p><strong>Budget:</strong> {_e(trip.get('budget') or 'Not specified')}</p>",
        f"<p><strong>Travel Style:</strong> {_e(trip.get('travelStyle') or 'Not specified')}</p>",
        f"<p><strong>Group Size:</strong> {group} {_plural(group, 'person', 'people')}</p>",
        f"<p><strong>Interests:</strong> {_e(interests)}</p>",
        *optional,
        "<p><strong>Status:</strong> Pending Manual Planning</p>",
    ])
    return MailMessage(to=recipient, sender=sender, subject=subject, html=html)


# --- Itinerary ready (to traveller) -----------------------------------------------

def _destination_rows(recommendation: dict[str, Any]) -> list[str]:
    rows = []
    for stop in recommendation.get("destinations") or []:
        nights = stop.get("numberOfNights") or 1
        rows.append(
            f"<li><strong>{_e(stop.get('cityName', ''))}</strong>: "
            f"{format_day(stop.get('arrivalDate'))} to {format_day(stop.get('departureDate'))} "
            f"({nights} {_plural(nights, 'night', 'nights')})</li>"
        )
    return rows


def _cost_rows(recommendation: dict[str, Any]) -> list[str]:
    cost = recommendation.get("totalCost") or {}
    if not cost.get("totalEstimate"):
        return []
    labels = [
        ("flights", "Flights"), ("accommodation", "Accommodation"),
        ("activities", "Activities"), ("food", "Food"),
        ("localTransport", "Local Transport"), ("miscellaneous", "Miscellaneous"),
    ]
    rows = ["<h3>Cost Breakdown</h3>", "<ul>"]
    rows += [
        f"<li>{label}: ${cost[key]}</li>" for key, label in labels if cost.get(key, 0) > 0
    ]
    rows.append("</ul>")
    rows.append(
        f"<p><strong>Total Estimated Cost:</strong> ${cost['totalEstimate']} "
        f"{_e(cost.get('currency') or 'USD')}</p>"
    )
    return rows


def format_itinerary_ready_message(
    trip_id: str,
    trip: dict[str, Any],
    profile: Profile,
    *,
    sender: str,
) -> MailMessage | None:
    """Traveller notice that their itinerary is complete. None when no address is known."""
    if not profile.email:
        return None
    where = destinations_label(trip, fallback="Your Destination")
    recommendation = trip.get("recommendation") or {}
    html = [
        "<h1>Your Detailed Itinerary is Ready!</h1>",
        f"<p>Get ready for an amazing trip to {_e(where)}</p>",
        f"<h2>Hi {_e(profile.name or 'Travel Enthusiast')}!</h2>",
        "<p>Your personalized travel itinerary is complete and ready for booking!</p>",
    ]
    if recommendation.get("tripOverview"):
        html.append(f"<p><em>\"{_e(recommendation['tripOverview'])}\"</em></p>")
    stops = _destination_rows(recommendation)
    if stops:
        html += ["<h3>Your Stops</h3>", "<ul>", *stops, "</ul>"]
    html += _cost_rows(recommendation)
    html.append(f"<p>Trip reference: {_e(trip_id)}</p>")
    return MailMessage(
        to=profile.email,
        sender=sender,
        subject=f"Your Detailed Itinerary for {where} is Ready!",
        html="\n".join(html),
    )
