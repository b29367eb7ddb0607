import uuid
import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_CATEGORY = "activity"


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class Activity(BaseModel):
    """A single planned event inside an itinerary day.

    An activity has no rank field of its own: its position in
    `ItineraryDay.activities` is its order.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, description="Activity name")
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    cost: Optional[float] = Field(default=0.0, description="Cost in the trip currency; missing counts as 0")
    category: Optional[str] = Field(default=DEFAULT_CATEGORY)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Activity name cannot be empty")
        return v.strip()

    @field_validator("cost", mode="before")
    @classmethod
    def blank_cost_is_zero(cls, v):
        if v in ("", None):
            return 0.0
        return v

    @property
    def cost_value(self) -> float:
        return float(self.cost or 0)

    @property
    def category_label(self) -> str:
        return self.category or DEFAULT_CATEGORY


class ItineraryDay(BaseModel):
    """One calendar day of a trip, holding an ordered list of activities."""

    id: str = Field(default_factory=new_id)
    trip_id: str = Field(..., min_length=1)
    date: dt.date
    title: str = ""
    description: str = ""
    order: int = Field(0, ge=0, description="Dense zero-based rank among the days of the trip")
    activities: List[Activity] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now_iso)

    @field_validator("activities", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or []

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class DayCreateRequest(BaseModel):
    date: dt.date
    title: str = Field(..., min_length=1)
    description: str = ""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Day title cannot be empty")
        return v.strip()


class DayUpdateRequest(BaseModel):
    date: Optional[dt.date] = None
    title: Optional[str] = None
    description: Optional[str] = None


class ActivityCreateRequest(BaseModel):
    """New activity; a name and a start time are required."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: dt.time
    end_time: Optional[dt.time] = None
    cost: Optional[float] = 0.0
    category: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class ActivityUpdateRequest(BaseModel):
    """Partial update; only the fields sent are changed."""

    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    cost: Optional[float] = None
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None or not v.strip():
            raise ValueError("Activity name cannot be empty")
        return v.strip()

    @field_validator("start_time")
    @classmethod
    def keep_start_time(cls, v):
        if v is None:
            raise ValueError("start_time cannot be removed")
        return v

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time is not None and self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class ReorderDaysRequest(BaseModel):
    source_index: int = Field(..., ge=0)
    dest_index: int = Field(..., ge=0)


class MoveActivityRequest(BaseModel):
    """A dropped activity drag; the caller never sends a request for a cancelled drop."""

    source_day_id: str
    dest_day_id: str
    source_index: int = Field(..., ge=0)
    dest_index: int = Field(..., ge=0)


class MoveActivityResponse(BaseModel):
    source_day: ItineraryDay
    dest_day: ItineraryDay
