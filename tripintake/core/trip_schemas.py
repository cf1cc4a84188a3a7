"""Trip Rule Trees — declarative shapes for trip submissions and staff recommendations.

Invariants:
    - Both trees are compiled once, at import; a broken definition fails startup
    - Trip submissions pass unknown extension fields through (ALLOW)
    - Recommendation payloads silently drop unknown fields (DROP)
    - Trip submissions carry 1-5 destinations, groupSize 1-20

Design Decisions:
    - Legacy fields (destination, paymentMethod) stay declared so older mobile
      builds keep validating (ADR: backward compatibility)
    - Calendar dates are checked by pattern only here; impossible dates such as
      2024-13-01 are caught by the date normalizer and reported as invalid_dates
"""

from tripintake.core.domain_types import AdditionalProperties, MAX_DESTINATIONS
from tripintake.core.schema_rules import compile_schema
from tripintake.core.shared_fragments import SHARED_FRAGMENTS


TRIP_SUBMISSION_SCHEMA: dict = {
    "type": "object",
    "required": ["destinations", "startDate", "endDate", "travelStyle", "groupSize"],
    "properties": {
        "destinations": {
            "type": "array",
            "minItems": 1,
            "maxItems": MAX_DESTINATIONS,
            "items": {"type": "string", "minLength": 1, "maxLength": 100},
        },
        "startDate": {"$ref": "calendar-date"},
        "endDate": {"$ref": "calendar-date"},
        "travelStyle": {"$ref": "travel-style"},
        "groupSize": {"type": "integer", "minimum": 1, "maximum": 20},
        # Optional preferences
        "departureLocation": {"type": "string", "minLength": 1, "maxLength": 100},
        "flexibleDates": {"type": "boolean", "default": False},
        "tripDuration": {"type": "integer", "minimum": 1, "maximum": 90},
        "budget": {"$ref": "budget"},
        "specialRequests": {"type": "string", "maxLength": 1000},
        "interests": {
            "type": "array",
            "maxItems": 20,
            "items": {"type": "string", "maxLength": 50},
        },
        "flightClass": {"$ref": "flight-class"},
        # Legacy
        "destination": {"type": "string", "maxLength": 100},
        "paymentMethod": {"type": "string", "maxLength": 50},
    },
}


_HOTEL = {
    "type": "object",
    "required": ["name", "rating", "pricePerNight", "location", "bookingUrl"],
    "properties": {
        "name": {"type": "string", "minLength": 1, "maxLength": 200},
        "rating": {"type": "number", "minimum": 1, "maximum": 5},
        "pricePerNight": {"type": "number", "minimum": 0, "maximum": 100_000},
        "pointsPerNight": {"type": "integer", "minimum": 0},
        "loyaltyProgram": {"type": "string", "maxLength": 100},
        "location": {"type": "string", "minLength": 1, "maxLength": 500},
        "bookingUrl": {"$ref": "http-url"},
        "detailedDescription": {"type": "string", "maxLength": 5000},
        "tripadvisorId": {"type": "string", "maxLength": 50},
        "tripadvisorUrl": {"$ref": "http-url"},
    },
}

_ACCOMMODATION_OPTION = {
    "type": "object",
    "required": ["id", "priority", "hotel"],
    "properties": {
        "id": {"type": "string"},
        "priority": {"type": "integer", "minimum": 1, "maximum": 10},
        "hotel": _HOTEL,
    },
}

_ACTIVITY = {
    "type": "object",
    "required": [
        "id", "name", "description", "location",
        "estimatedCost", "estimatedDuration", "category",
    ],
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string", "minLength": 1, "maxLength": 200},
        "description": {"type": "string", "maxLength": 2000},
        "location": {"type": "string", "minLength": 1, "maxLength": 500},
        "estimatedCost": {"type": "number", "minimum": 0, "maximum": 100_000},
        "estimatedDuration": {"type": "string", "maxLength": 100},
        "category": {"type": "string", "maxLength": 50},
    },
}

_RESTAURANT = {
    "type": "object",
    "required": ["id", "name", "cuisine", "location", "priceRange", "description"],
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string", "minLength": 1, "maxLength": 200},
        "cuisine": {"type": "string", "maxLength": 100},
        "location": {"type": "string", "minLength": 1, "maxLength": 500},
        "priceRange": {"type": "string", "pattern": r"^\$+$", "maxLength": 10},
        "description": {"type": "string", "maxLength": 2000},
    },
}

_DESTINATION = {
    "type": "object",
    "required": ["id", "cityName", "arrivalDate", "departureDate", "numberOfNights"],
    "properties": {
        "id": {"type": "string"},
        "cityName": {"type": "string", "minLength": 1, "maxLength": 100},
        "arrivalDate": {"$ref": "calendar-date"},
        "departureDate": {"$ref": "calendar-date"},
        "numberOfNights": {"type": "integer", "minimum": 1, "maximum": 90},
        "accommodationOptions": {"type": "array", "items": _ACCOMMODATION_OPTION},
        "recommendedActivities": {"type": "array", "items": _ACTIVITY},
        "recommendedRestaurants": {"type": "array", "items": _RESTAURANT},
        "selectedAccommodationId": {"type": "string"},
    },
}

_COST_COMPONENT = {"type": "number", "minimum": 0}

RECOMMENDATION_SCHEMA: dict = {
    "type": "object",
    "required": ["id", "tripOverview", "destinations", "logistics", "totalCost"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "tripOverview": {"type": "string", "maxLength": 5000},
        "destinations": {
            "type": "array",
            "minItems": 1,
            "maxItems": MAX_DESTINATIONS,
            "items": _DESTINATION,
        },
        "logistics": {
            "type": "object",
            "properties": {
                "transportSegments": {"type": "array", "items": {"type": "object"}},
                "bookingDeadlines": {"type": "array", "items": {"type": "object"}},
                "generalInstructions": {"type": "string", "maxLength": 5000},
            },
        },
        "totalCost": {
            "type": "object",
            "required": [
                "totalEstimate", "flights", "accommodation", "activities",
                "food", "localTransport", "miscellaneous", "currency",
            ],
            "properties": {
                "totalEstimate": {"type": "number", "minimum": 0, "maximum": 1_000_000},
                "flights": _COST_COMPONENT,
                "accommodation": _COST_COMPONENT,
                "activities": _COST_COMPONENT,
                "food": _COST_COMPONENT,
                "localTransport": _COST_COMPONENT,
                "miscellaneous": _COST_COMPONENT,
                "currency": {"$ref": "currency-code"},
            },
        },
        "createdAt": {"description": "Timestamp field (set by the store)"},
    },
}


TRIP_SUBMISSION_RULES = compile_schema(
    TRIP_SUBMISSION_SCHEMA, SHARED_FRAGMENTS,
    additional=AdditionalProperties.ALLOW,
)

RECOMMENDATION_RULES = compile_schema(
    RECOMMENDATION_SCHEMA, SHARED_FRAGMENTS,
    additional=AdditionalProperties.DROP,
)
