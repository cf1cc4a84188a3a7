"""Trip Intake — screens, admits and persists one trip submission.

Invariants:
    - Stage order: rule tree, cross-field rules, date normalization, assembly,
      admission, persistence; the first failing stage decides the rejection
    - Nothing is written before admission succeeds, and a submission rejected by
      any earlier stage never consumes quota
    - The staff notification is handed back to the caller to run AFTER the
      response; it can never unwind an admitted submission

Design Decisions:
    - Pure stages (core) wrapped by two IO steps (admission, add): the whole
      decision is testable against a fake store (ADR: ExMA impureim sandwich)
"""

import logging
from typing import Any

from tripintake.core.assemble_submission import assemble_trip_record
from tripintake.core.domain_types import TRIPS_COLLECTION, Identity, TripId
from tripintake.core.errors import IntakeError
from tripintake.core.screen_submission import normalize_trip_dates, screen_trip_submission
from tripintake.services.admission_control import check_and_reserve
from tripintake.services.context import AppContext

logger = logging.getLogger(__name__)


async def submit_trip(
    envelope: Any, identity: Identity, ctx: AppContext,
) -> tuple[TripId, dict[str, Any]]:
    """Run the intake pipeline. Returns the new trip id and the stored record."""
    now = ctx.clock()
    try:
        cleaned = screen_trip_submission(envelope)
        dates = normalize_trip_dates(cleaned)
        record = assemble_trip_record(cleaned, dates, identity, now)
    except IntakeError as e:
        e.context.identity = identity
        logger.warning(
            f"Trip submission rejected: {e.message}",
            extra={"identity": identity, "error_code": e.code,
                   "reason": e.reason.value if e.reason else None},
        )
        raise

    await check_and_reserve(
        identity, now, ctx.store,
        tz=ctx.settings.reference_timezone,
        ceiling=ctx.settings.rate_limit_daily_ceiling,
        locks=ctx.identity_locks,
    )
    trip_id = TripId(await ctx.store.add(TRIPS_COLLECTION, record))
    logger.info("Trip admitted", extra={"identity": identity, "trip_id": trip_id})
    return trip_id, record
