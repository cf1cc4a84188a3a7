"""Trip Notifications — best-effort staff and traveller emails.

Invariants:
    - notify_* never raise IntakeErrors: mail and store failures are logged at
      WARNING and suppressed, so a committed admission or completion is never unwound
    - No mail client configured means the notification is skipped (INFO log)
    - A missing traveller profile still sends the staff alert with placeholders;
      a missing or unreadable points balance renders as zero

Design Decisions:
    - Reads profile and trip documents through the same DocumentStore as the
      intake path (ADR: one store collaborator)
"""

import logging
from typing import Any

from tripintake.core.domain_types import (
    TRIPS_COLLECTION, USER_POINTS_COLLECTION, USERS_COLLECTION, TripId,
)
from tripintake.core.errors import ErrorContext, IntakeError
from tripintake.core.format_messages import (
    PointsBalance, Profile, format_itinerary_ready_message, format_new_trip_message,
)
from tripintake.core.repository_protocols import DocumentStore
from tripintake.infrastructure.mail_client import ResilientMailClient

logger = logging.getLogger(__name__)


class TripNotifier:
    """Notifier that renders core messages and sends them via ResilientMailClient."""

    def __init__(
        self,
        store: DocumentStore,
        mail: ResilientMailClient | None,
        *,
        sender: str,
        staff_recipient: str,
    ):
        self.store = store
        self.mail = mail
        self.sender = sender
        self.staff_recipient = staff_recipient

    async def notify_new_trip(self, trip_id: TripId, trip: dict[str, Any]) -> None:
        if self.mail is None:
            logger.info("Mail not configured, skipping new trip notification",
                        extra={"trip_id": trip_id})
            return
        try:
            uid = trip.get("userId")
            profile = await self._profile(uid)
            points = await self._points(uid)
            message = format_new_trip_message(
                trip_id, trip, profile,
                recipient=self.staff_recipient, sender=self.sender, points=points,
            )
            await self.mail.send(message, ErrorContext(trip_id=trip_id))
            logger.info("New trip notification sent", extra={"trip_id": trip_id})
        except IntakeError as e:
            logger.warning(
                f"New trip notification failed: {e.message}",
                extra={"trip_id": trip_id, "error_code": e.code},
            )

    async def notify_itinerary_ready(self, trip_id: TripId) -> None:
        if self.mail is None:
            logger.info("Mail not configured, skipping itinerary notification",
                        extra={"trip_id": trip_id})
            return
        try:
            trip = await self.store.get(TRIPS_COLLECTION, trip_id)
            if trip is None:
                logger.warning("Completed trip vanished before notification",
                               extra={"trip_id": trip_id})
                return
            profile = await self._profile(trip.get("userId"))
            message = format_itinerary_ready_message(
                trip_id, trip, profile, sender=self.sender,
            )
            if message is None:
                logger.info("Traveller has no email address, skipping",
                            extra={"trip_id": trip_id})
                return
            await self.mail.send(message, ErrorContext(trip_id=trip_id))
            logger.info("Itinerary notification sent", extra={"trip_id": trip_id})
        except IntakeError as e:
            logger.warning(
                f"Itinerary notification failed: {e.message}",
                extra={"trip_id": trip_id, "error_code": e.code},
            )

    async def _profile(self, uid: Any) -> Profile:
        if not isinstance(uid, str) or not uid:
            return Profile()
        try:
            return Profile.from_document(await self.store.get(USERS_COLLECTION, uid))
        except IntakeError as e:
            logger.warning(f"Could not read traveller profile: {e.message}",
                           extra={"identity": uid})
            return Profile()

    async def _points(self, uid: Any) -> PointsBalance:
        if not isinstance(uid, str) or not uid:
            return PointsBalance()
        try:
            return PointsBalance.from_document(await self.store.get(USER_POINTS_COLLECTION, uid))
        except IntakeError as e:
            logger.warning(f"Could not read traveller points: {e.message}",
                           extra={"identity": uid})
            return PointsBalance()
