"""HTTP surface — tests for status codes, envelopes and background notifications."""

from tests.sample_payloads import recommendation, trip
from tripintake.core.domain_types import RATE_LIMIT_COLLECTION, TRIPS_COLLECTION


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ─── Trip submission ─────────────────────────────────────────────

async def test_submit_requires_token(client, store):
    response = await client.post("/api/v1/trips", json=trip())
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["error"]["code"] == "UNAUTHENTICATED"
    assert store.calls == []


async def test_submit_rejects_forged_token(client):
    response = await client.post("/api/v1/trips", json=trip(), headers=_auth("not.a.jwt"))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


async def test_submit_admits_and_notifies(client, store, notifier, user_token):
    response = await client.post("/api/v1/trips", json=trip(), headers=_auth(user_token))
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert (TRIPS_COLLECTION, body["tripId"]) in store.documents
    assert [trip_id for trip_id, _ in notifier.new_trips] == [body["tripId"]]


async def test_structural_rejection_lists_every_field(client, notifier, user_token):
    envelope = trip(groupSize=50, travelStyle="Backpacking")
    del envelope["endDate"]
    response = await client.post("/api/v1/trips", json=envelope, headers=_auth(user_token))
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["reason"] == "validation_failed"
    assert [d["field"] for d in error["details"]] == ["endDate", "travelStyle", "groupSize"]
    assert notifier.new_trips == []


async def test_cross_field_rejection(client, user_token):
    envelope = trip(startDate="2024-06-22", endDate="2024-06-15")
    response = await client.post("/api/v1/trips", json=envelope, headers=_auth(user_token))
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "CROSS_FIELD_VALIDATION_FAILED"
    assert error["details"][0]["message"] == "End date must be after start date"


async def test_impossible_date_rejection(client, user_token):
    response = await client.post(
        "/api/v1/trips", json=trip(startDate="2024-02-30"), headers=_auth(user_token),
    )
    assert response.status_code == 400
    assert response.json()["error"]["reason"] == "invalid_dates"


async def test_out_of_range_flexible_timestamp_is_invalid_dates(client, store, user_token):
    body = trip(flexibleDates=True, earliestStartDate="0001-01-01T00:00:00+05:00")
    response = await client.post("/api/v1/trips", json=body, headers=_auth(user_token))
    assert response.status_code == 400
    assert response.json()["error"]["reason"] == "invalid_dates"
    assert store.writes("trips") == 0


async def test_rate_limited_with_retry_after(client, store, user_token):
    store.documents[(RATE_LIMIT_COLLECTION, "user-1")] = {
        "lastSubmissionDate": "2024-06-01", "submissionCount": 10,
    }
    response = await client.post("/api/v1/trips", json=trip(), headers=_auth(user_token))
    assert response.status_code == 429
    # clock fixture is 09:00 UTC
    assert response.headers["retry-after"] == str(15 * 3600)
    assert response.json()["error"]["reason"] == "rate_limited"


async def test_malformed_json(client, user_token):
    response = await client.post(
        "/api/v1/trips", content=b"{not json",
        headers={**_auth(user_token), "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["reason"] == "validation_failed"


async def test_non_object_body(client, user_token):
    response = await client.post("/api/v1/trips", json=[1, 2], headers=_auth(user_token))
    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["message"] == "must be object"


async def test_store_outage_is_503(client, store, user_token):
    store.fail_on.add("get")
    response = await client.post("/api/v1/trips", json=trip(), headers=_auth(user_token))
    assert response.status_code == 503
    assert response.json()["error"]["retryable"] is True


# ─── Recommendation completion ───────────────────────────────────

async def test_recommendation_requires_admin(client, user_token):
    response = await client.post(
        "/api/v1/recommendations",
        json={"tripId": "trip-1", "recommendation": recommendation()},
        headers=_auth(user_token),
    )
    assert response.status_code == 403


async def test_recommendation_completes_trip(client, store, notifier, admin_token):
    store.documents[(TRIPS_COLLECTION, "trip-1")] = {"status": "pending", "userId": "user-1"}
    response = await client.post(
        "/api/v1/recommendations",
        json={"tripId": "trip-1", "recommendation": recommendation()},
        headers=_auth(admin_token),
    )
    assert response.status_code == 200
    assert response.json() == {"tripId": "trip-1", "success": True}
    assert store.documents[(TRIPS_COLLECTION, "trip-1")]["status"] == "completed"
    assert notifier.ready == ["trip-1"]


async def test_recommendation_for_unknown_trip(client, admin_token):
    response = await client.post(
        "/api/v1/recommendations",
        json={"tripId": "nope", "recommendation": recommendation()},
        headers=_auth(admin_token),
    )
    assert response.status_code == 404


async def test_recommendation_nested_error_path(client, store, admin_token):
    store.documents[(TRIPS_COLLECTION, "trip-1")] = {"status": "pending"}
    payload = recommendation()
    payload["destinations"][0]["recommendedRestaurants"][0]["priceRange"] = "€€"
    response = await client.post(
        "/api/v1/recommendations",
        json={"tripId": "trip-1", "recommendation": payload},
        headers=_auth(admin_token),
    )
    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == (
        "destinations[0].recommendedRestaurants[0].priceRange"
    )


async def test_recommendation_wrapper_validated(client, admin_token):
    response = await client.post(
        "/api/v1/recommendations", json={"recommendation": {}}, headers=_auth(admin_token),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# ─── Health ──────────────────────────────────────────────────────

async def test_liveness(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_readiness_without_database(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
