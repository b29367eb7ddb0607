"""
FastAPI dependencies resolving the services created at startup.

The application lifespan stores one instance of each service on `app.state`;
tests replace them through `app.dependency_overrides`.
"""

from fastapi import Request

from globetrotter.config.config_models import Settings as AppConfig
from globetrotter.services.itinerary_service import ItineraryService
from globetrotter.services.search_service import SearchService
from globetrotter.services.trip_service import TripService


def get_trip_service(request: Request) -> TripService:
    return request.app.state.trip_service


def get_itinerary_service(request: Request) -> ItineraryService:
    return request.app.state.itinerary_service


def get_search_service(request: Request) -> SearchService:
    return request.app.state.search_service


def get_app_settings(request: Request) -> AppConfig:
    return request.app.state.app_config
