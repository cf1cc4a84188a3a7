"""Admission Control — tests for the read-decide-write counter against a fake store.

Tests cover:
    - Ten admissions per identity per day, the eleventh rejected
    - Rejection writes nothing; next day admits again
    - Fail closed on store faults
    - Unlocked races may double-admit; IdentityLocks serialize them
"""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from tripintake.core.domain_types import RATE_LIMIT_COLLECTION, Identity
from tripintake.core.errors import RateLimitExceededError, StoreUnavailableError
from tripintake.services.admission_control import IdentityLocks, check_and_reserve

UTC = timezone.utc
NOW = datetime(2024, 6, 15, 10, tzinfo=UTC)
ALICE = Identity("alice")


async def test_ten_per_day_then_rejected(store):
    for expected in range(1, 11):
        record = await check_and_reserve(ALICE, NOW, store, tz=UTC)
        assert record.submission_count == expected

    with pytest.raises(RateLimitExceededError) as exc:
        await check_and_reserve(ALICE, NOW, store, tz=UTC)
    assert exc.value.resets_on == date(2024, 6, 16)
    assert exc.value.retry_after_seconds == 14 * 3600
    assert store.documents[(RATE_LIMIT_COLLECTION, "alice")] == {
        "lastSubmissionDate": "2024-06-15", "submissionCount": 10,
    }


async def test_rejection_writes_nothing(store):
    store.documents[(RATE_LIMIT_COLLECTION, "alice")] = {
        "lastSubmissionDate": "2024-06-15", "submissionCount": 10,
    }
    with pytest.raises(RateLimitExceededError):
        await check_and_reserve(ALICE, NOW, store, tz=UTC)
    assert store.writes(RATE_LIMIT_COLLECTION) == 0


async def test_next_day_admits_again(store):
    store.documents[(RATE_LIMIT_COLLECTION, "alice")] = {
        "lastSubmissionDate": "2024-06-15", "submissionCount": 10,
    }
    record = await check_and_reserve(ALICE, NOW + timedelta(days=1), store, tz=UTC)
    assert record.submission_count == 1
    assert record.last_submission_date == date(2024, 6, 16)


async def test_identities_counted_separately(store):
    store.documents[(RATE_LIMIT_COLLECTION, "alice")] = {
        "lastSubmissionDate": "2024-06-15", "submissionCount": 10,
    }
    record = await check_and_reserve(Identity("bob"), NOW, store, tz=UTC)
    assert record.submission_count == 1


async def test_configured_ceiling(store):
    await check_and_reserve(ALICE, NOW, store, tz=UTC, ceiling=1)
    with pytest.raises(RateLimitExceededError):
        await check_and_reserve(ALICE, NOW, store, tz=UTC, ceiling=1)


@pytest.mark.parametrize("operation", ["get", "set"])
async def test_store_fault_fails_closed(store, operation):
    store.fail_on.add(operation)
    with pytest.raises(StoreUnavailableError):
        await check_and_reserve(ALICE, NOW, store, tz=UTC)
    if operation == "get":
        assert (RATE_LIMIT_COLLECTION, "alice") not in store.documents


async def test_unlocked_race_can_double_admit(store):
    store.documents[(RATE_LIMIT_COLLECTION, "alice")] = {
        "lastSubmissionDate": "2024-06-15", "submissionCount": 9,
    }
    results = await asyncio.gather(
        check_and_reserve(ALICE, NOW, store, tz=UTC),
        check_and_reserve(ALICE, NOW, store, tz=UTC),
        return_exceptions=True,
    )
    assert all(not isinstance(r, Exception) for r in results)
    assert store.documents[(RATE_LIMIT_COLLECTION, "alice")]["submissionCount"] == 10


async def test_locked_race_admits_exactly_one(store):
    store.documents[(RATE_LIMIT_COLLECTION, "alice")] = {
        "lastSubmissionDate": "2024-06-15", "submissionCount": 9,
    }
    locks = IdentityLocks()
    results = await asyncio.gather(
        check_and_reserve(ALICE, NOW, store, tz=UTC, locks=locks),
        check_and_reserve(ALICE, NOW, store, tz=UTC, locks=locks),
        return_exceptions=True,
    )
    rejected = [r for r in results if isinstance(r, RateLimitExceededError)]
    assert len(rejected) == 1
    assert store.documents[(RATE_LIMIT_COLLECTION, "alice")]["submissionCount"] == 10


async def test_locks_released_when_idle(store):
    locks = IdentityLocks()
    await asyncio.gather(*(
        check_and_reserve(Identity(f"user-{i}"), NOW, store, tz=UTC, locks=locks)
        for i in range(5)
    ))
    assert len(locks) == 0


async def test_lock_released_after_rejection(store):
    store.documents[(RATE_LIMIT_COLLECTION, "alice")] = {
        "lastSubmissionDate": "2024-06-15", "submissionCount": 10,
    }
    locks = IdentityLocks()
    with pytest.raises(RateLimitExceededError):
        await check_and_reserve(ALICE, NOW, store, tz=UTC, locks=locks)
    assert len(locks) == 0
