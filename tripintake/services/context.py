"""Application Context — process-wide collaborators built once at startup.

Invariants:
    - Exactly one AppContext per process, stored on app.state by the lifespan
    - Every collaborator is constructed here and passed by reference; no module
      keeps a lazily-built global client handle
    - identity_locks is set only when admission_serialize_per_identity is on

Design Decisions:
    - Dataclass over a DI container: explicit fields, trivially replaced in
      tests with fakes (ADR: testable by substitution)
    - clock is injectable so day-boundary behaviour is testable without sleeping
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from tripintake.config import Settings
from tripintake.core.repository_protocols import DocumentStore, IdentityVerifier, Notifier
from tripintake.infrastructure.database import DatabaseSessionManager
from tripintake.infrastructure.document_store import SqlDocumentStore
from tripintake.infrastructure.identity import JwtIdentityVerifier
from tripintake.infrastructure.mail_client import ResilientMailClient
from tripintake.services.admission_control import IdentityLocks
from tripintake.services.notifications import TripNotifier


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AppContext:
    settings: Settings
    store: DocumentStore
    verifier: IdentityVerifier
    notifier: Notifier
    identity_locks: IdentityLocks | None = None
    clock: Callable[[], datetime] = field(default=utc_now)
    db: DatabaseSessionManager | None = None
    mail: ResilientMailClient | None = None

    async def aclose(self) -> None:
        if self.mail is not None:
            await self.mail.aclose()
        if self.db is not None:
            await self.db.dispose()


def build_context(
    settings: Settings,
    db: DatabaseSessionManager,
    *,
    mail_transport: httpx.AsyncBaseTransport | None = None,
) -> AppContext:
    """Wire the production collaborators from settings."""
    store = SqlDocumentStore(db, timeout_seconds=settings.store_timeout_seconds)
    mail = None
    if settings.sendgrid_api_key:
        mail = ResilientMailClient(
            settings.sendgrid_api_key,
            base_url=settings.sendgrid_base_url,
            max_retries=settings.mail_max_retries,
            base_delay_ms=settings.mail_base_delay_ms,
            max_delay_ms=settings.mail_max_delay_ms,
            timeout_seconds=settings.mail_timeout_seconds,
            transport=mail_transport,
        )
    return AppContext(
        settings=settings,
        store=store,
        verifier=JwtIdentityVerifier(
            settings.jwt_secret, settings.jwt_algorithm, settings.jwt_admin_claim,
        ),
        notifier=TripNotifier(
            store, mail,
            sender=settings.mail_from,
            staff_recipient=settings.mail_staff_recipient,
        ),
        identity_locks=(
            IdentityLocks() if settings.admission_serialize_per_identity else None
        ),
        db=db,
        mail=mail,
    )
