"""Recommendation Completion — validates a staff recommendation and completes the trip.

Invariants:
    - Only admin identities may complete a trip (PermissionDeniedError otherwise)
    - The stored recommendation is the validated copy: unknown fields dropped
    - Every destination's dates normalize before anything is written
    - Completion is one single-document update; a missing trip is ResourceNotFoundError

Design Decisions:
    - The trip state machine lives outside this service; completion only
      consumes the validation verdict and writes the terminal state
"""

import logging
from typing import Any

from tripintake.core.assemble_submission import assemble_completion_update
from tripintake.core.domain_types import TRIPS_COLLECTION, TripId
from tripintake.core.errors import ErrorContext, IntakeError, PermissionDeniedError
from tripintake.core.repository_protocols import VerifiedIdentity
from tripintake.core.screen_submission import (
    normalize_destination_dates, screen_recommendation,
)
from tripintake.services.context import AppContext

logger = logging.getLogger(__name__)


async def complete_trip(
    trip_id: TripId, payload: Any, caller: VerifiedIdentity, ctx: AppContext,
) -> dict[str, Any]:
    """Validate and store a recommendation. Returns the partial update written."""
    if not caller.is_admin:
        raise PermissionDeniedError(
            context=ErrorContext(identity=caller.uid, trip_id=trip_id),
        )
    try:
        recommendation = screen_recommendation(payload)
        normalize_destination_dates(recommendation)
    except IntakeError as e:
        e.context.identity = caller.uid
        e.context.trip_id = trip_id
        logger.warning(
            f"Recommendation rejected: {e.message}",
            extra={"trip_id": trip_id, "error_code": e.code},
        )
        raise

    update = assemble_completion_update(recommendation, caller.uid, ctx.clock())
    await ctx.store.update(TRIPS_COLLECTION, trip_id, update)
    logger.info("Trip completed", extra={"trip_id": trip_id, "identity": caller.uid})
    return update
