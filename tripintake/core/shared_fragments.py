"""Shared Rule Fragments — vocabularies referenced by id from the trip and recommendation trees.

Invariants:
    - Fragment ids are stable: clients validate against the same vocabularies
    - budget is a preference LEVEL, never a monetary amount
    - travel-style describes pace and type, never budget

Design Decisions:
    - Plain dict definitions, compiled with the tree that references them
      (ADR: one resolution pass at import, no per-request lookup)
"""

BUDGET_LEVELS = ["Budget", "Moderate", "Comfortable", "Luxury"]

TRAVEL_STYLES = ["Relaxed", "Comfortable", "Adventurous", "Fast-Paced", "Luxury"]

FLIGHT_CLASSES = ["Economy", "Premium Economy", "Business", "First Class"]


SHARED_FRAGMENTS: dict[str, dict] = {
    "budget": {
        "type": "string",
        "enum": BUDGET_LEVELS,
        "description": "Budget preference level (NOT a monetary amount like $1500)",
    },
    "travel-style": {
        "type": "string",
        "enum": TRAVEL_STYLES,
        "description": "Travel style preference (pace and type, NOT budget)",
    },
    "flight-class": {
        "type": "string",
        "enum": FLIGHT_CLASSES,
    },
    "calendar-date": {
        "type": "string",
        "pattern": r"^\d{4}-\d{2}-\d{2}$",
        "description": "Calendar date in YYYY-MM-DD format",
    },
    "currency-code": {
        "type": "string",
        "pattern": r"^[A-Z]{3}$",
        "description": "ISO 4217 currency code (e.g., USD, EUR)",
    },
    "http-url": {
        "type": "string",
        "format": "uri",
        "maxLength": 2000,
    },
}
