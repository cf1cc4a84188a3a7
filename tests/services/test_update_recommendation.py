"""Recommendation Completion — tests for admin-only trip completion."""

import pytest

from tests.sample_payloads import recommendation
from tripintake.core.domain_types import TRIPS_COLLECTION, Identity, TripId
from tripintake.core.errors import (
    CrossFieldValidationError, DateParseError, PermissionDeniedError,
    ResourceNotFoundError, StructuralValidationError,
)
from tripintake.core.repository_protocols import VerifiedIdentity
from tripintake.services.update_recommendation import complete_trip

ADMIN = VerifiedIdentity(Identity("admin-1"), is_admin=True)
TRIP_ID = TripId("trip-1")


@pytest.fixture
def pending_trip(store):
    store.documents[(TRIPS_COLLECTION, TRIP_ID)] = {"status": "pending", "userId": "user-1"}


async def test_completes_trip(ctx, store, clock, pending_trip):
    payload = recommendation()
    payload["internalNotes"] = "not for the traveller"
    await complete_trip(TRIP_ID, payload, ADMIN, ctx)

    stored = store.documents[(TRIPS_COLLECTION, TRIP_ID)]
    assert stored["status"] == "completed"
    assert stored["completedBy"] == "admin-1"
    assert stored["completedAt"] == clock.now
    assert stored["userId"] == "user-1"
    assert "internalNotes" not in stored["recommendation"]


async def test_non_admin_denied_before_validation(ctx, store, pending_trip):
    caller = VerifiedIdentity(Identity("user-1"))
    with pytest.raises(PermissionDeniedError):
        await complete_trip(TRIP_ID, {"garbage": True}, caller, ctx)
    assert store.calls == []


async def test_structural_rejection(ctx, store, pending_trip):
    payload = recommendation()
    payload["destinations"] = []
    with pytest.raises(StructuralValidationError) as exc:
        await complete_trip(TRIP_ID, payload, ADMIN, ctx)
    assert exc.value.context.trip_id == TRIP_ID
    assert store.calls == []


async def test_destination_order_rejection(ctx, pending_trip):
    payload = recommendation()
    payload["destinations"][0]["departureDate"] = payload["destinations"][0]["arrivalDate"]
    with pytest.raises(CrossFieldValidationError):
        await complete_trip(TRIP_ID, payload, ADMIN, ctx)


async def test_impossible_destination_date(ctx, pending_trip):
    payload = recommendation()
    payload["destinations"][1]["departureDate"] = "2024-06-31"
    with pytest.raises(DateParseError) as exc:
        await complete_trip(TRIP_ID, payload, ADMIN, ctx)
    assert exc.value.field == "destinations[1].departureDate"


async def test_missing_trip(ctx):
    with pytest.raises(ResourceNotFoundError):
        await complete_trip(TripId("nope"), recommendation(), ADMIN, ctx)
