"""Trip Submission Route — the intake boundary for traveller requests.

Invariants:
    - Body is any JSON value; the rule tree, not Pydantic, judges its shape
    - 201 only after admission AND persistence succeeded
    - The staff notification runs as a background task after the response

Design Decisions:
    - Thin route delegates to services.submit_trip (ADR: ExMA impureim sandwich)
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, status

from tripintake.api.dependencies import get_context, get_identity
from tripintake.core.repository_protocols import VerifiedIdentity
from tripintake.schemas.trips import TripCreated
from tripintake.services.context import AppContext
from tripintake.services.submit_trip import submit_trip

router = APIRouter(prefix="/api/v1/trips", tags=["trips"])


@router.post(
    "", response_model=TripCreated, response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_trip(
    background_tasks: BackgroundTasks,
    envelope: Any = Body(...),
    caller: VerifiedIdentity = Depends(get_identity),
    ctx: AppContext = Depends(get_context),
):
    """Screen, admit and store one trip submission."""
    trip_id, record = await submit_trip(envelope, caller.uid, ctx)
    background_tasks.add_task(ctx.notifier.notify_new_trip, trip_id, record)
    return TripCreated(trip_id=trip_id)
