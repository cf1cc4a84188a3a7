"""Admission Control — read, decide, write back the per-identity daily counter.

Invariants:
    - Fail closed: a store fault or timeout propagates as StoreUnavailableError
      and the submission is NOT admitted
    - A rejection writes nothing; the stored count never exceeds the ceiling
      through this path
    - With IdentityLocks, checks for one identity run one at a time within this
      process; without them, two racing requests may both read the same count

Design Decisions:
    - Independent read then write on one document (no transaction): the store
      only promises single-document atomicity (ADR: accepted race, opt-in lock)
    - Locks are reference-counted and dropped when idle so the registry does
      not grow with the number of identities ever seen
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, tzinfo

from tripintake.core.admission import Reject, RateLimitRecord, decide_admission
from tripintake.core.domain_types import (
    DAILY_SUBMISSION_CEILING, RATE_LIMIT_COLLECTION, Identity,
)
from tripintake.core.errors import RateLimitExceededError
from tripintake.core.repository_protocols import DocumentStore

logger = logging.getLogger(__name__)


class IdentityLocks:
    """In-process asyncio.Lock per identity."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, identity: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(identity, asyncio.Lock())
        self._users[identity] = self._users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[identity] -= 1
            if self._users[identity] == 0:
                del self._users[identity]
                del self._locks[identity]

    def __len__(self) -> int:
        return len(self._locks)


async def _reserve(
    identity: Identity,
    now: datetime,
    store: DocumentStore,
    ceiling: int,
    tz: tzinfo,
) -> RateLimitRecord:
    document = await store.get(RATE_LIMIT_COLLECTION, identity)
    decision = decide_admission(RateLimitRecord.from_document(document), now, tz, ceiling)
    if isinstance(decision, Reject):
        logger.warning(
            f"Daily ceiling reached ({decision.count}/{ceiling})",
            extra={"identity": identity, "reason": "rate_limited"},
        )
        raise RateLimitExceededError(
            identity, decision.resets_on, decision.retry_after_seconds, ceiling,
        )
    await store.set(RATE_LIMIT_COLLECTION, identity, decision.record.to_document())
    return decision.record


async def check_and_reserve(
    identity: Identity,
    now: datetime,
    store: DocumentStore,
    *,
    tz: tzinfo,
    ceiling: int = DAILY_SUBMISSION_CEILING,
    locks: IdentityLocks | None = None,
) -> RateLimitRecord:
    """Admit one submission for `identity` or raise RateLimitExceededError.

    Returns the record written back. StoreUnavailableError propagates.
    """
    if locks is None:
        return await _reserve(identity, now, store, ceiling, tz)
    async with locks.hold(identity):
        return await _reserve(identity, now, store, ceiling, tz)
