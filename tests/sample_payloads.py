"""Shared sample envelopes — a known-good trip submission and staff recommendation."""

import copy


_TRIP = {
    "destinations": ["Paris"],
    "startDate": "2024-06-15",
    "endDate": "2024-06-22",
    "travelStyle": "Comfortable",
    "groupSize": 2,
}

_RECOMMENDATION = {
    "id": "rec-1",
    "tripOverview": "A week between Paris and Lyon",
    "destinations": [
        {
            "id": "d1",
            "cityName": "Paris",
            "arrivalDate": "2024-06-15",
            "departureDate": "2024-06-18",
            "numberOfNights": 3,
            "accommodationOptions": [
                {
                    "id": "a1",
                    "priority": 1,
                    "hotel": {
                        "name": "Hotel Lutetia",
                        "rating": 4.5,
                        "pricePerNight": 450,
                        "location": "45 Boulevard Raspail",
                        "bookingUrl": "https://example.com/lutetia",
                    },
                },
            ],
            "recommendedActivities": [
                {
                    "id": "x1",
                    "name": "Louvre",
                    "description": "Museum visit",
                    "location": "Rue de Rivoli",
                    "estimatedCost": 22,
                    "estimatedDuration": "3 hours",
                    "category": "Culture",
                },
            ],
            "recommendedRestaurants": [
                {
                    "id": "r1",
                    "name": "Le Comptoir",
                    "cuisine": "French",
                    "location": "Odeon",
                    "priceRange": "$$$",
                    "description": "Bistro",
                },
            ],
        },
        {
            "id": "d2",
            "cityName": "Lyon",
            "arrivalDate": "2024-06-18",
            "departureDate": "2024-06-22",
            "numberOfNights": 4,
        },
    ],
    "logistics": {
        "transportSegments": [{"from": "Paris", "to": "Lyon", "mode": "train"}],
        "generalInstructions": "Book the TGV early",
    },
    "totalCost": {
        "totalEstimate": 3000,
        "flights": 1200,
        "accommodation": 1350,
        "activities": 100,
        "food": 250,
        "localTransport": 50,
        "miscellaneous": 50,
        "currency": "EUR",
    },
}


def trip(**overrides) -> dict:
    envelope = copy.deepcopy(_TRIP)
    envelope.update(overrides)
    return envelope


def recommendation() -> dict:
    return copy.deepcopy(_RECOMMENDATION)
