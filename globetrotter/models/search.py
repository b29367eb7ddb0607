from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class CityResult(BaseModel):
    id: str
    name: str
    type: Literal["city"] = "city"
    description: str
    trip_count: int = Field(..., ge=0, description="Number of public trips mentioning the city")


class ActivityResult(BaseModel):
    id: str
    name: str
    type: Literal["activity"] = "activity"
    category: str
    description: str
    location: Optional[str] = None
    occurrences: int = Field(..., ge=1, description="Number of public itinerary entries with this activity name")


class SearchResponse(BaseModel):
    query: str
    search_type: Literal["cities", "activities"]
    results: List[CityResult] | List[ActivityResult]
