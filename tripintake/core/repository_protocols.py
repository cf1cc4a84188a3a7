"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - DocumentStore offers single-document atomicity only, nothing stronger

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions never are; the shell orchestrates the async calls
      around the pure logic
"""

from dataclasses import dataclass
from typing import Any, Protocol

from tripintake.core.domain_types import Identity, TripId


class DocumentStore(Protocol):
    """Key-value document store keyed by (collection, key) — implemented by shell.

    Implementations raise StoreUnavailableError on faults and timeouts.
    """
    async def get(self, collection: str, key: str) -> dict[str, Any] | None: ...
    async def set(self, collection: str, key: str, value: dict[str, Any]) -> None: ...
    async def update(
        self, collection: str, key: str, partial: dict[str, Any],
    ) -> None: ...
    async def add(self, collection: str, value: dict[str, Any]) -> str: ...


@dataclass(frozen=True)
class VerifiedIdentity:
    """Caller identity established by the verifier."""
    uid: Identity
    is_admin: bool = False


class IdentityVerifier(Protocol):
    """Turns a bearer credential into a stable identity — implemented by shell.

    Raises AuthenticationError for missing, expired or forged credentials.
    """
    def verify(self, token: str) -> VerifiedIdentity: ...


class Notifier(Protocol):
    """Best-effort outbound notifications — implemented by shell.

    Implementations never raise on mail or store failures: they log and suppress.
    """
    async def notify_new_trip(self, trip_id: TripId, trip: dict[str, Any]) -> None: ...
    async def notify_itinerary_ready(self, trip_id: TripId) -> None: ...
