import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from globetrotter.models.itinerary import ItineraryDay, new_id, utc_now_iso


class Trip(BaseModel):
    """A user-owned travel plan spanning a date range."""

    id: str = Field(default_factory=new_id)
    owner_id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    start_date: dt.date
    end_date: dt.date
    is_public: bool = False
    budget: Optional[float] = Field(default=None, ge=0)
    cover_photo_url: Optional[str] = None
    copied_from: Optional[str] = None
    created_at: str = Field(default_factory=utc_now_iso)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @property
    def budget_value(self) -> float:
        return float(self.budget or 0)


class TripCreateRequest(BaseModel):
    """
    Request model for creating a trip.

    Name length is checked by the trip service against the configured minimum;
    the date range is validated here.
    """

    name: str
    description: str = ""
    start_date: dt.date
    end_date: dt.date
    is_public: bool = False
    budget: Optional[float] = Field(default=None, ge=0)
    cover_photo_url: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("cover_photo_url")
    @classmethod
    def blank_url_is_none(cls, v):
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def check_date_range(self):
        if self.start_date >= self.end_date:
            raise ValueError("End date must be after start date")
        return self


class TripUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    is_public: Optional[bool] = None
    cover_photo_url: Optional[str] = None


class BudgetUpdateRequest(BaseModel):
    budget: float = Field(..., ge=0)


class TripWithDays(BaseModel):
    trip: Trip
    days: List[ItineraryDay]


class DashboardStats(BaseModel):
    total_trips: int
    public_trips: int
    upcoming_trips: int
