import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Set

from globetrotter.config.config_models import SearchSettings
from globetrotter.data_layer.base import ITINERARIES, TRIPS, DocumentStore
from globetrotter.models.itinerary import DEFAULT_CATEGORY, ItineraryDay
from globetrotter.models.search import ActivityResult, CityResult
from globetrotter.models.trip import Trip


logger = logging.getLogger(__name__)


def _contains(text: Optional[str], needle: str) -> bool:
    return bool(text) and needle in text.lower()


def city_from_location(location: str) -> str:
    """Treat the text before the first comma of a location as its city."""
    return location.split(',')[0].strip()


class SearchService:
    """Discovery over public trips: cities they visit and activities they contain."""

    def __init__(self, store: DocumentStore, config: Optional[SearchSettings] = None):
        self.store = store
        self.config = config or SearchSettings()

    def _public_trips(self) -> List[Trip]:
        return [Trip.model_validate(document) for document in self.store.query(TRIPS, is_public=True)]

    def _public_days(self, trip_ids: Set[str]) -> List[ItineraryDay]:
        # a single scan is cheaper than one query per public trip
        return [
            ItineraryDay.model_validate(document)
            for document in self.store.query(ITINERARIES)
            if document.get('trip_id') in trip_ids
        ]

    def search_cities(self, query: str) -> List[CityResult]:
        """
        Cities mentioned by public trips.

        A trip whose name or description matches contributes the first word of its
        name; an activity whose location matches contributes the text before the
        first comma. Results are ranked by the number of distinct public trips.
        """
        needle = (query or '').strip().lower()
        if not needle:
            return []

        trips = self._public_trips()
        cities: Dict[str, Set[str]] = OrderedDict()
        for trip in trips:
            if _contains(trip.name, needle) or _contains(trip.description, needle):
                city = trip.name.split()[0]
                cities.setdefault(city, set()).add(trip.id)

        for day in self._public_days({trip.id for trip in trips}):
            for activity in day.activities:
                if _contains(activity.location, needle):
                    city = city_from_location(activity.location)
                    if city:
                        cities.setdefault(city, set()).add(day.trip_id)

        results = [
            CityResult(
                id=city.lower(),
                name=city,
                description=f'Discover amazing trips and activities in {city}',
                trip_count=len(trip_ids),
            )
            for city, trip_ids in cities.items()
        ]
        results.sort(key=lambda result: (-result.trip_count, result.name.lower()))
        logger.info(f"City search '{needle}' matched {len(results)} cities")
        return results[:self.config.max_results]

    def search_activities(self, query: str) -> List[ActivityResult]:
        """Activities of public trips matching on name, description or category, one result per name."""
        needle = (query or '').strip().lower()
        if not needle:
            return []

        trip_ids = {trip.id for trip in self._public_trips()}
        found: Dict[str, ActivityResult] = OrderedDict()
        for day in self._public_days(trip_ids):
            for activity in day.activities:
                if not (
                    _contains(activity.name, needle)
                    or _contains(activity.description, needle)
                    or _contains(activity.category, needle)
                ):
                    continue
                existing = found.get(activity.name)
                if existing is not None:
                    existing.occurrences += 1
                    continue
                found[activity.name] = ActivityResult(
                    id=activity.id,
                    name=activity.name,
                    category=activity.category or DEFAULT_CATEGORY,
                    description=activity.description or 'Amazing activity to try',
                    location=activity.location,
                    occurrences=1,
                )

        results = sorted(found.values(), key=lambda result: (-result.occurrences, result.name.lower()))
        logger.info(f"Activity search '{needle}' matched {len(results)} activities")
        return results[:self.config.max_results]
