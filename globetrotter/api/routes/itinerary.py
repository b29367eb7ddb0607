"""
Itinerary endpoints: days, activities, drag-and-drop reordering and live updates.

Every endpoint checks that the caller owns the trip before touching its days.
"""

import asyncio
import json
import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from globetrotter.api.dependencies import get_itinerary_service, get_trip_service
from globetrotter.data_layer.base import ChangeEvent
from globetrotter.models.itinerary import (
    ActivityCreateRequest,
    ActivityUpdateRequest,
    DayCreateRequest,
    DayUpdateRequest,
    ItineraryDay,
    MoveActivityRequest,
    MoveActivityResponse,
    ReorderDaysRequest,
)
from globetrotter.services.itinerary_service import ItineraryService
from globetrotter.services.trip_service import TripService
from globetrotter.utils.auth_utils import get_current_user_id
from globetrotter.utils.exceptions import InvalidMoveError, InvalidMoveException


logger = logging.getLogger(__name__)
router = APIRouter(prefix='/trips/{trip_id}/itinerary', tags=['itinerary'])

# seconds between keep-alive comments on an idle event stream
KEEPALIVE_SECONDS = 15.0


def owned_trip_id(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    trip_service: TripService = Depends(get_trip_service),
) -> str:
    """Path dependency: the trip id, once the caller is known to own the trip."""
    trip_service.get_owned_trip(trip_id, user_id)
    return trip_id


@router.get('/days', response_model=List[ItineraryDay])
def list_days(
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    return itinerary_service.list_days(trip_id)


@router.post('/days', response_model=ItineraryDay, status_code=status.HTTP_201_CREATED)
def add_day(
    request: DayCreateRequest,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    return itinerary_service.add_day(trip_id, request)


@router.patch('/days/{day_id}', response_model=ItineraryDay)
def update_day(
    day_id: str,
    request: DayUpdateRequest,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    return itinerary_service.update_day(trip_id, day_id, request)


@router.delete('/days/{day_id}', response_model=List[ItineraryDay])
def delete_day(
    day_id: str,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    """Delete a day and return the remaining days with their new orders."""
    return itinerary_service.delete_day(trip_id, day_id)


@router.post('/days/{day_id}/activities', response_model=ItineraryDay, status_code=status.HTTP_201_CREATED)
def add_activity(
    day_id: str,
    request: ActivityCreateRequest,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    return itinerary_service.add_activity(trip_id, day_id, request)


@router.patch('/days/{day_id}/activities/{activity_id}', response_model=ItineraryDay)
def update_activity(
    day_id: str,
    activity_id: str,
    request: ActivityUpdateRequest,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    return itinerary_service.update_activity(trip_id, day_id, activity_id, request)


@router.delete('/days/{day_id}/activities/{activity_id}', response_model=ItineraryDay)
def delete_activity(
    day_id: str,
    activity_id: str,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    return itinerary_service.delete_activity(trip_id, day_id, activity_id)


@router.post('/reorder', response_model=List[ItineraryDay])
def reorder_days(
    request: ReorderDaysRequest,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    """Move the day at `source_index` to `dest_index` and return the days in their new order."""
    try:
        return itinerary_service.reorder_days(trip_id, request.source_index, request.dest_index)
    except InvalidMoveError as e:
        logger.warning(f'Rejected day reorder in trip {trip_id}: {e}')
        raise InvalidMoveException(str(e)) from e


@router.post('/move', response_model=MoveActivityResponse)
def move_activity(
    request: MoveActivityRequest,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    """Move an activity within a day or between two days of the trip."""
    try:
        return itinerary_service.move_activity(trip_id, request)
    except InvalidMoveError as e:
        logger.warning(f'Rejected activity move in trip {trip_id}: {e}')
        raise InvalidMoveException(str(e)) from e


def format_change_event(event: ChangeEvent) -> str:
    """Render a store change as one server-sent event."""
    payload = {'kind': event.kind, 'day_id': event.doc_id, 'day': event.document}
    return f'event: day\ndata: {json.dumps(payload)}\n\n'


@router.get('/events')
async def itinerary_events(
    request: Request,
    trip_id: str = Depends(owned_trip_id),
    itinerary_service: ItineraryService = Depends(get_itinerary_service),
):
    """
    Stream changes to the trip's days as server-sent events.

    Writes happen on worker threads, so changes are handed to the event loop
    through a queue. The subscription is removed when the client disconnects.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(event: ChangeEvent) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    # subscribing lists the current days, a blocking store read
    unsubscribe = await run_in_threadpool(itinerary_service.subscribe_days, trip_id, on_change)
    logger.info(f'Client subscribed to itinerary events of trip {trip_id}')

    async def event_stream():
        try:
            yield 'event: ready\ndata: {}\n\n'
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ': keep-alive\n\n'
                    continue
                yield format_change_event(event)
        finally:
            unsubscribe()
            logger.info(f'Client unsubscribed from itinerary events of trip {trip_id}')

    return StreamingResponse(
        event_stream(),
        media_type='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'Connection': 'keep-alive'},
    )
