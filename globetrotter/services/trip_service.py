import logging
import datetime as dt
from typing import List, Optional

from globetrotter.config.config_models import TripSettings
from globetrotter.data_layer.base import ITINERARIES, TRIPS, DocumentStore
from globetrotter.models.itinerary import ItineraryDay, new_id, utc_now_iso
from globetrotter.models.trip import (
    DashboardStats,
    Trip,
    TripCreateRequest,
    TripUpdateRequest,
    TripWithDays,
)
from globetrotter.services.itinerary_service import ItineraryService
from globetrotter.utils.date_utils import date_range_inclusive, is_upcoming
from globetrotter.utils.exceptions import (
    InvalidTripException,
    TripAccessDeniedException,
    TripNotFoundException,
    TripNotPublicException,
)


logger = logging.getLogger(__name__)


class TripService:
    """Trip lifecycle: creation with its day skeleton, ownership checks, edits, deletion and copies."""

    def __init__(
        self,
        store: DocumentStore,
        itinerary_service: Optional[ItineraryService] = None,
        config: Optional[TripSettings] = None,
    ):
        self.store = store
        self.config = config or TripSettings()
        self.itinerary_service = itinerary_service or ItineraryService(store, self.config)

    def _check_name(self, name: str) -> str:
        name = (name or '').strip()
        if not name:
            raise InvalidTripException('Trip name is required')
        if len(name) < self.config.min_name_length:
            raise InvalidTripException(
                f'Trip name must be at least {self.config.min_name_length} characters long'
            )
        return name

    def create_trip(self, owner_id: str, request: TripCreateRequest) -> TripWithDays:
        """
        Create a trip together with one itinerary day per date of its range.

        Days are titled "Day 1", "Day 2", ... and ordered by date.
        """
        name = self._check_name(request.name)
        trip = Trip(
            owner_id=owner_id,
            name=name,
            description=request.description,
            start_date=request.start_date,
            end_date=request.end_date,
            is_public=request.is_public,
            budget=request.budget,
            cover_photo_url=request.cover_photo_url,
        )
        self.store.put(TRIPS, trip.to_document())

        days = [
            ItineraryDay(trip_id=trip.id, date=date, title=f'Day {position + 1}', order=position)
            for position, date in enumerate(date_range_inclusive(trip.start_date, trip.end_date))
        ]
        for day in days:
            self.store.put(ITINERARIES, day.to_document())

        logger.info(f'Created trip {trip.id} for {owner_id} with {len(days)} days')
        return TripWithDays(trip=trip, days=days)

    def list_trips(self, owner_id: str) -> List[Trip]:
        """The owner's trips, latest start date first."""
        trips = [Trip.model_validate(document) for document in self.store.query(TRIPS, owner_id=owner_id)]
        return sorted(trips, key=lambda trip: trip.start_date, reverse=True)

    def get_trip(self, trip_id: str) -> Trip:
        document = self.store.get(TRIPS, trip_id)
        if document is None:
            raise TripNotFoundException(trip_id)
        return Trip.model_validate(document)

    def get_owned_trip(self, trip_id: str, user_id: str) -> Trip:
        trip = self.get_trip(trip_id)
        if trip.owner_id != user_id:
            logger.warning(f'User {user_id} denied access to trip {trip_id}')
            raise TripAccessDeniedException()
        return trip

    def get_public_trip(self, trip_id: str) -> Trip:
        trip = self.get_trip(trip_id)
        if not trip.is_public:
            raise TripNotPublicException()
        return trip

    def update_trip(self, trip_id: str, user_id: str, request: TripUpdateRequest) -> Trip:
        trip = self.get_owned_trip(trip_id, user_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return trip

        if 'name' in changes:
            changes['name'] = self._check_name(changes['name'])
        start = changes.get('start_date', trip.start_date)
        end = changes.get('end_date', trip.end_date)
        if start >= end:
            raise InvalidTripException('End date must be after start date')
        if 'cover_photo_url' in changes and not changes['cover_photo_url'].strip():
            changes['cover_photo_url'] = None

        updated = trip.model_copy(update=changes)
        document = self.store.update(TRIPS, trip_id, updated.model_dump(mode='json', include=set(changes)))
        logger.info(f'Updated trip {trip_id}: {sorted(changes)}')
        return Trip.model_validate(document)

    def update_budget(self, trip_id: str, user_id: str, budget: float) -> Trip:
        self.get_owned_trip(trip_id, user_id)
        document = self.store.update(TRIPS, trip_id, {'budget': float(budget)})
        return Trip.model_validate(document)

    def delete_trip(self, trip_id: str, user_id: str) -> None:
        """Delete a trip and every itinerary day that belongs to it."""
        self.get_owned_trip(trip_id, user_id)
        day_ids = [day.id for day in self.itinerary_service.list_days(trip_id)]
        self.store.delete_many(ITINERARIES, day_ids)
        self.store.delete(TRIPS, trip_id)
        logger.info(f'Deleted trip {trip_id} and {len(day_ids)} days')

    def copy_trip(self, trip_id: str, user_id: str) -> TripWithDays:
        """
        Copy a public trip and its itinerary into the user's own trips.

        The copy is private, records where it came from and keeps the source's
        day order and activities. The budget is not copied.
        """
        source = self.get_public_trip(trip_id)
        copy = Trip(
            owner_id=user_id,
            name=f'{source.name}{self.config.copy_suffix}',
            description=source.description,
            start_date=source.start_date,
            end_date=source.end_date,
            is_public=False,
            cover_photo_url=source.cover_photo_url,
            copied_from=source.id,
        )
        self.store.put(TRIPS, copy.to_document())

        days = [
            day.model_copy(update={'id': new_id(), 'trip_id': copy.id, 'created_at': utc_now_iso()})
            for day in self.itinerary_service.list_days(source.id)
        ]
        for day in days:
            self.store.put(ITINERARIES, day.to_document())

        logger.info(f'User {user_id} copied trip {source.id} into {copy.id}')
        return TripWithDays(trip=copy, days=days)

    def dashboard(self, owner_id: str, today: Optional[dt.date] = None) -> DashboardStats:
        trips = self.list_trips(owner_id)
        return DashboardStats(
            total_trips=len(trips),
            public_trips=sum(1 for trip in trips if trip.is_public),
            upcoming_trips=sum(1 for trip in trips if is_upcoming(trip.start_date, today)),
        )
