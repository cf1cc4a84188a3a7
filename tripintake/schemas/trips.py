"""Trip API Schemas — Pydantic models for the HTTP boundary.

Invariants:
    - Submission bodies are NOT modelled here: the rule tree validates them so
      every violation is reported in one response
    - RecommendationRequest only checks the outer wrapper; the recommendation
      itself goes through RECOMMENDATION_RULES

Design Decisions:
    - Field aliases keep the camelCase wire names the mobile and admin clients send
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TripCreated(BaseModel):
    """Response for an admitted submission."""
    model_config = ConfigDict(populate_by_name=True)

    trip_id: str = Field(alias="tripId")
    success: bool = True


class RecommendationRequest(BaseModel):
    """Admin completion request: which trip, and the staff-authored plan."""
    model_config = ConfigDict(populate_by_name=True)

    trip_id: str = Field(alias="tripId", min_length=1, max_length=200)
    recommendation: dict[str, Any]


class RecommendationStored(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    trip_id: str = Field(alias="tripId")
    success: bool = True
