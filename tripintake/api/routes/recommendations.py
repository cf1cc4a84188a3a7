"""Recommendation Route — admin completion of a pending trip.

Invariants:
    - Admin claim required before the payload is even looked at
    - 200 only after the trip document was updated
    - The itinerary notification runs as a background task after the response
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from tripintake.api.dependencies import get_context, require_admin
from tripintake.core.domain_types import TripId
from tripintake.core.repository_protocols import VerifiedIdentity
from tripintake.schemas.trips import RecommendationRequest, RecommendationStored
from tripintake.services.context import AppContext
from tripintake.services.update_recommendation import complete_trip

router = APIRouter(prefix="/api/v1/recommendations", tags=["recommendations"])


@router.post("", response_model=RecommendationStored, response_model_by_alias=True)
async def store_recommendation(
    body: RecommendationRequest,
    background_tasks: BackgroundTasks,
    caller: VerifiedIdentity = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    """Validate a staff recommendation and mark the trip completed."""
    trip_id = TripId(body.trip_id)
    await complete_trip(trip_id, body.recommendation, caller, ctx)
    background_tasks.add_task(ctx.notifier.notify_itinerary_ready, trip_id)
    return RecommendationStored(trip_id=trip_id)
