"""
Budget endpoints: set a trip's budget and read the spending summary.
"""

import logging

from fastapi import APIRouter, Depends

from globetrotter.api.dependencies import get_app_settings, get_trip_service
from globetrotter.config.config_models import Settings as AppConfig
from globetrotter.models.budget import BudgetSummary
from globetrotter.models.trip import BudgetUpdateRequest, Trip
from globetrotter.services import aggregates
from globetrotter.services.trip_service import TripService
from globetrotter.utils.auth_utils import get_current_user_id


logger = logging.getLogger(__name__)
router = APIRouter(prefix='/trips/{trip_id}/budget', tags=['budget'])


@router.get('', response_model=BudgetSummary)
def get_budget_summary(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
    app_config: AppConfig = Depends(get_app_settings),
):
    """Spending against the budget: status, per-day and per-category costs, and alerts."""
    trip = trip_service.get_owned_trip(trip_id, user_id)
    days = trip_service.itinerary_service.list_days(trip_id)
    return aggregates.summarize_budget(days, trip.budget, app_config.budget)


@router.put('', response_model=Trip)
def update_budget(
    trip_id: str,
    request: BudgetUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
):
    logger.info(f'Setting budget of trip {trip_id} to {request.budget}')
    return trip_service.update_budget(trip_id, user_id, request.budget)
