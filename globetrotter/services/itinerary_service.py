import logging
from typing import Callable, List, Optional, Sequence, Set

from pydantic import ValidationError

from globetrotter.config.config_models import TripSettings
from globetrotter.data_layer.base import ITINERARIES, ChangeEvent, DocumentStore, Unsubscribe
from globetrotter.models.itinerary import (
    Activity,
    ActivityCreateRequest,
    ActivityUpdateRequest,
    DayCreateRequest,
    DayUpdateRequest,
    ItineraryDay,
    MoveActivityRequest,
    MoveActivityResponse,
)
from globetrotter.services import reorder
from globetrotter.utils.exceptions import (
    ActivityNotFoundException,
    DayNotFoundException,
    InvalidActivityException,
    StoreWriteError,
)


logger = logging.getLogger(__name__)


def _activities_field(activities: Sequence[Activity]) -> dict:
    return {'activities': [activity.model_dump(mode='json') for activity in activities]}


def _merged_activity(activity: Activity, changes: dict) -> Activity:
    """Apply a partial update and re-check the rules a new activity must satisfy."""
    try:
        merged = Activity.model_validate({**activity.model_dump(), **changes})
    except ValidationError as e:
        raise InvalidActivityException(f'Invalid activity: {e.errors()[0]["msg"]}') from e
    if merged.start_time and merged.end_time and merged.end_time < merged.start_time:
        raise InvalidActivityException('End time must not be before start time')
    return merged


class ItineraryService:
    """
    Reads and writes the itinerary days of a trip.

    Activity changes are always persisted as a replacement of the whole
    `activities` array of a day. Ownership of the trip is checked by the caller.
    """

    def __init__(self, store: DocumentStore, config: Optional[TripSettings] = None):
        self.store = store
        self.config = config or TripSettings()

    def list_days(self, trip_id: str) -> List[ItineraryDay]:
        """Days of a trip in display order (by `order`, then by date)."""
        documents = self.store.query(ITINERARIES, trip_id=trip_id)
        days = [ItineraryDay.model_validate(document) for document in documents]
        return sorted(days, key=lambda day: (day.order, day.date))

    def get_day(self, trip_id: str, day_id: str) -> ItineraryDay:
        document = self.store.get(ITINERARIES, day_id)
        if document is None or document.get('trip_id') != trip_id:
            raise DayNotFoundException(day_id)
        return ItineraryDay.model_validate(document)

    def add_day(self, trip_id: str, request: DayCreateRequest) -> ItineraryDay:
        existing = self.list_days(trip_id)
        day = ItineraryDay(
            trip_id=trip_id,
            date=request.date,
            title=request.title,
            description=request.description,
            order=max((d.order for d in existing), default=-1) + 1,
        )
        self.store.put(ITINERARIES, day.to_document())
        logger.info(f'Added day {day.id} to trip {trip_id} at position {day.order}')
        return day

    def update_day(self, trip_id: str, day_id: str, request: DayUpdateRequest) -> ItineraryDay:
        day = self.get_day(trip_id, day_id)
        changes = request.model_dump(mode='json', exclude_unset=True, exclude_none=True)
        if not changes:
            return day
        document = self.store.update(ITINERARIES, day_id, changes)
        return ItineraryDay.model_validate(document)

    def delete_day(self, trip_id: str, day_id: str) -> List[ItineraryDay]:
        """
        Delete a day and close the gap it leaves in the remaining orders.

        The delete and the renumbering are separate writes. If the renumbering
        fails the day stays deleted and the remaining orders stay unique but
        sparse; the next reorder or delete makes them dense again.
        """
        self.get_day(trip_id, day_id)
        self.store.delete(ITINERARIES, day_id)

        remaining = self.list_days(trip_id)
        updates = {day.id: {'order': position} for position, day in enumerate(remaining) if day.order != position}
        try:
            self.store.update_many(ITINERARIES, updates)
        except StoreWriteError:
            logger.error(f'Deleted day {day_id} of trip {trip_id} but failed to renumber {sorted(updates)}')
            raise
        logger.info(f'Deleted day {day_id} from trip {trip_id}; renumbered {len(updates)} days')
        return [day.model_copy(update={'order': position}) for position, day in enumerate(remaining)]

    def add_activity(self, trip_id: str, day_id: str, request: ActivityCreateRequest) -> ItineraryDay:
        day = self.get_day(trip_id, day_id)
        data = request.model_dump()
        data['category'] = data.get('category') or self.config.default_category
        activity = Activity(**data)

        document = self.store.update(ITINERARIES, day_id, _activities_field([*day.activities, activity]))
        return ItineraryDay.model_validate(document)

    def update_activity(
        self, trip_id: str, day_id: str, activity_id: str, request: ActivityUpdateRequest
    ) -> ItineraryDay:
        day = self.get_day(trip_id, day_id)
        changes = request.model_dump(exclude_unset=True)

        found = False
        activities = []
        for activity in day.activities:
            if activity.id == activity_id:
                activity = _merged_activity(activity, changes)
                found = True
            activities.append(activity)
        if not found:
            raise ActivityNotFoundException(activity_id)

        document = self.store.update(ITINERARIES, day_id, _activities_field(activities))
        return ItineraryDay.model_validate(document)

    def delete_activity(self, trip_id: str, day_id: str, activity_id: str) -> ItineraryDay:
        day = self.get_day(trip_id, day_id)
        activities = [activity for activity in day.activities if activity.id != activity_id]
        if len(activities) == len(day.activities):
            raise ActivityNotFoundException(activity_id)

        document = self.store.update(ITINERARIES, day_id, _activities_field(activities))
        return ItineraryDay.model_validate(document)

    def reorder_days(self, trip_id: str, source_index: int, dest_index: int) -> List[ItineraryDay]:
        """
        Move one day and persist the rewritten orders in a single atomic write.

        Raises:
            InvalidMoveError: If an index is out of range.
            StoreWriteError: If the write fails; nothing was changed in that case.
        """
        days = self.list_days(trip_id)
        reordered = reorder.move_day(days, source_index, dest_index)

        previous = {day.id: day.order for day in days}
        updates = {day.id: {'order': day.order} for day in reordered if previous[day.id] != day.order}
        self.store.update_many(ITINERARIES, updates)

        logger.info(f'Moved day {source_index} -> {dest_index} in trip {trip_id} ({len(updates)} orders changed)')
        return reordered

    def move_activity(self, trip_id: str, request: MoveActivityRequest) -> MoveActivityResponse:
        """
        Move an activity inside a day or between two days of the same trip.

        A cross-day move writes both days in one transaction, so the activity can
        never end up in both days or in neither.

        Raises:
            DayNotFoundException: If a day does not belong to the trip.
            InvalidMoveError: If an index is out of range.
            StoreWriteError: If the write fails.
        """
        same_day = request.source_day_id == request.dest_day_id
        source_day = self.get_day(trip_id, request.source_day_id)
        dest_day = source_day if same_day else self.get_day(trip_id, request.dest_day_id)

        new_source, new_dest = reorder.move_activity(
            source_day.activities,
            dest_day.activities,
            request.source_index,
            request.dest_index,
            same_day,
        )

        if same_day:
            self.store.update(ITINERARIES, source_day.id, _activities_field(new_source))
        else:
            self.store.update_many(ITINERARIES, {
                source_day.id: _activities_field(new_source),
                dest_day.id: _activities_field(new_dest),
            })

        logger.info(
            f'Moved activity {request.source_day_id}[{request.source_index}] -> '
            f'{request.dest_day_id}[{request.dest_index}] in trip {trip_id}'
        )
        return MoveActivityResponse(
            source_day=source_day.model_copy(update={'activities': new_source}),
            dest_day=dest_day.model_copy(update={'activities': new_dest}),
        )

    def subscribe_days(self, trip_id: str, on_change: Callable[[ChangeEvent], None]) -> Unsubscribe:
        """
        Forward changes to the days of one trip.

        Updates published without a document snapshot are matched by the day ids
        known for the trip; newly created days join that set.
        """
        known_ids: Set[str] = {day.id for day in self.list_days(trip_id)}

        def forward(event: ChangeEvent) -> None:
            if event.document is not None and event.document.get('trip_id') == trip_id:
                known_ids.add(event.doc_id)
            elif event.doc_id not in known_ids:
                return
            if event.kind == 'delete':
                known_ids.discard(event.doc_id)
            on_change(event)

        return self.store.subscribe(ITINERARIES, forward)
