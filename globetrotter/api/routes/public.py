"""
Public trip endpoints: the read-only view of a shared trip, its share links and copying it.

Viewing needs no token; copying does.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from globetrotter.api.dependencies import get_trip_service
from globetrotter.config.config import settings
from globetrotter.models.budget import ItinerarySummary
from globetrotter.models.itinerary import ItineraryDay
from globetrotter.models.trip import Trip, TripWithDays
from globetrotter.services import aggregates
from globetrotter.services.trip_service import TripService
from globetrotter.utils.auth_utils import get_current_user_id
from globetrotter.utils.share_links import ShareLinks, build_share_links


logger = logging.getLogger(__name__)
router = APIRouter(prefix='/public/trips', tags=['public'])


class PublicTripResponse(BaseModel):
    """Response model for the read-only view of a public trip."""

    trip: Trip
    days: List[ItineraryDay]
    summary: ItinerarySummary
    share: ShareLinks


@router.get('/{trip_id}', response_model=PublicTripResponse)
def get_public_trip(trip_id: str, trip_service: TripService = Depends(get_trip_service)):
    trip = trip_service.get_public_trip(trip_id)
    days = trip_service.itinerary_service.list_days(trip_id)
    return PublicTripResponse(
        trip=trip,
        days=days,
        summary=aggregates.summarize_itinerary(days),
        share=build_share_links(settings.public_base_url, trip.id, trip.name),
    )


@router.get('/{trip_id}/share', response_model=ShareLinks)
def get_share_links(trip_id: str, trip_service: TripService = Depends(get_trip_service)):
    trip = trip_service.get_public_trip(trip_id)
    return build_share_links(settings.public_base_url, trip.id, trip.name)


@router.post('/{trip_id}/copy', response_model=TripWithDays, status_code=status.HTTP_201_CREATED)
def copy_public_trip(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    """Copy a public trip into the caller's trips as a private trip."""
    return trip_service.copy_trip(trip_id, user_id)
