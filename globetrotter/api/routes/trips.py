"""
Trip endpoints: create, list, view, edit and delete the caller's trips.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from globetrotter.api.dependencies import get_trip_service
from globetrotter.models.trip import DashboardStats, Trip, TripCreateRequest, TripUpdateRequest, TripWithDays
from globetrotter.services.trip_service import TripService
from globetrotter.utils.auth_utils import get_current_user_id


logger = logging.getLogger(__name__)
router = APIRouter(prefix='/trips', tags=['trips'])


@router.post('', response_model=TripWithDays, status_code=status.HTTP_201_CREATED)
def create_trip(
    request: TripCreateRequest,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    """Create a trip with one empty day per date of its range."""
    logger.info(f"Creating trip '{request.name}' for user {user_id}")
    return trip_service.create_trip(user_id, request)


@router.get('', response_model=List[Trip])
def list_trips(
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    return trip_service.list_trips(user_id)


@router.get('/dashboard', response_model=DashboardStats)
def get_dashboard(
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    """Trip counts shown on the user's dashboard."""
    return trip_service.dashboard(user_id)


@router.get('/{trip_id}', response_model=TripWithDays)
def get_trip(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    trip = trip_service.get_owned_trip(trip_id, user_id)
    return TripWithDays(trip=trip, days=trip_service.itinerary_service.list_days(trip_id))


@router.patch('/{trip_id}', response_model=Trip)
def update_trip(
    trip_id: str,
    request: TripUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    return trip_service.update_trip(trip_id, user_id, request)


@router.delete('/{trip_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_trip(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    """Delete a trip together with its itinerary."""
    trip_service.delete_trip(trip_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
