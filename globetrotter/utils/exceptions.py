"""
Exception classes for the GlobeTrotter service.

HTTP-facing exceptions extend FastAPI's HTTPException so routes can raise them
directly. `InvalidMoveError` and `StoreWriteError` are internal: the first signals
a broken reorder contract, the second a failed write to the document store.
"""

from typing import Optional, Sequence

from fastapi import HTTPException


class TripException(HTTPException):
    """
    Base exception for trip and itinerary errors.

    Args:
        status_code (int): HTTP status code for the error response.
        detail (str): Human-readable error message.
        headers (Optional[dict], optional): Additional HTTP headers. Defaults to None.
    """
    def __init__(self, status_code: int, detail: str, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class TripNotFoundException(TripException):
    """
    Raised when a trip id does not resolve to a stored trip.

    HTTP Status: 404 Not Found
    """
    def __init__(self, trip_id: str):
        super().__init__(status_code=404, detail=f"Trip {trip_id} not found")


class TripAccessDeniedException(TripException):
    """
    Raised when a user tries to view or edit a trip owned by someone else.

    HTTP Status: 403 Forbidden
    """
    def __init__(self):
        super().__init__(status_code=403, detail="You do not have permission to access this trip")


class TripNotPublicException(TripException):
    """
    Raised when a private trip is requested through the public view.

    HTTP Status: 403 Forbidden
    """
    def __init__(self):
        super().__init__(status_code=403, detail="This trip is private and cannot be viewed")


class DayNotFoundException(TripException):
    """HTTP Status: 404 Not Found"""
    def __init__(self, day_id: str):
        super().__init__(status_code=404, detail=f"Itinerary day {day_id} not found")


class ActivityNotFoundException(TripException):
    """HTTP Status: 404 Not Found"""
    def __init__(self, activity_id: str):
        super().__init__(status_code=404, detail=f"Activity {activity_id} not found")


class InvalidTripException(TripException):
    """
    Raised when trip data fails a business rule (name too short, bad date range).

    HTTP Status: 400 Bad Request

    Example:
        >>> raise InvalidTripException("Trip name must be at least 3 characters long")
    """
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class InvalidActivityException(TripException):
    """
    Raised when an activity update would leave the activity invalid,
    e.g. an end time before its start time.

    HTTP Status: 400 Bad Request
    """
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class InvalidMoveException(TripException):
    """
    Raised by the API layer when a reorder request carries indices outside the
    current collections.

    HTTP Status: 400 Bad Request
    """
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=f"Invalid move: {message}")


class TokenExpiredException(TripException):
    """HTTP Status: 401 Unauthorized"""
    def __init__(self):
        super().__init__(
            status_code=401,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"}
        )


class InvalidTokenException(TripException):
    """HTTP Status: 401 Unauthorized"""
    def __init__(self, detail: str = "Invalid token"):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InvalidMoveError(IndexError):
    """
    Raised by the reorder engine when an index lies outside its list.

    This is a programming error on the caller's side; the engine never clamps.

    Attributes:
        index (int): The offending index.
        length (int): Length of the list it was checked against.
    """
    def __init__(self, name: str, index: int, length: int):
        self.name = name
        self.index = index
        self.length = length
        super().__init__(f"{name}={index} is out of range for a list of length {length}")


class StoreWriteError(Exception):
    """
    A write to the document store failed.

    Not an HTTPException: services raise it and the application maps it to 502.

    Args:
        message (str): What went wrong.
        collection (str): Collection the write targeted.
        doc_ids (Sequence[str]): Ids of the documents in the failed write.
        error_code (Optional[str]): Backend error code if available.
    """
    def __init__(self, message: str, collection: str, doc_ids: Sequence[str] = (), error_code: Optional[str] = None):
        self.message = message
        self.collection = collection
        self.doc_ids = list(doc_ids)
        self.error_code = error_code
        super().__init__(self.message)
