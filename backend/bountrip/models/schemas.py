from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


# --- Chat ---

class ChatMessage(BaseModel):
    # The system text travels in ChatRequest.system, never in history
    role: Literal["user", "assistant", "tool"]
    content: str | None = None
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: list[dict] | None = None


class ChatRequest(BaseModel):
    model: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)
    system: str = ""
    history: list[ChatMessage] = Field(default_factory=list)
    stream: bool = False
    temperature: float = Field(default=0.5, ge=0, le=2)
    max_tokens: int | None = Field(default=None, ge=1)
    top_p: float = Field(default=1, ge=0, le=1)
    frequency_penalty: float = Field(default=0.0001, ge=-2, le=2)
    presence_penalty: float = Field(default=0, ge=-2, le=2)
    stop: str | list[str] | None = None
    tools: list[dict[str, Any]] | None = None
    tool_choice: str | dict[str, Any] | None = None
    json_schema_name: str | None = None
    json_schema: dict[str, Any] | None = None

    def history_messages(self) -> list[dict]:
        return [m.model_dump(exclude_none=True) for m in self.history]


# --- Travel ---

class _TravelRequest(BaseModel):
    model_config = {"str_strip_whitespace": True, "populate_by_name": True}


class TagsRequest(_TravelRequest):
    input: str = Field(..., min_length=1, max_length=4000)


class DescriptionRequest(_TravelRequest):
    place: str = Field(..., min_length=1, max_length=500)


class ItineraryRequest(_TravelRequest):
    input: str = Field(..., min_length=1, max_length=500)
    duration: float = Field(..., gt=0, le=60)
    preferences: str | None = Field(default=None, max_length=1000)


class BudgetRequest(_TravelRequest):
    destination: str = Field(..., min_length=1, max_length=500)
    duration: float = Field(..., gt=0, le=365)
    travel_style: str = Field(..., alias="travelStyle", min_length=1, max_length=100)


class ActivitiesRequest(_TravelRequest):
    destination: str = Field(..., min_length=1, max_length=500)
    interests: list[str] = Field(..., min_length=1, max_length=50)


class AccommodationRequest(_TravelRequest):
    destination: str = Field(..., min_length=1, max_length=500)
    check_in: str = Field(..., alias="checkIn", min_length=1)
    check_out: str = Field(..., alias="checkOut", min_length=1)
    preferences: str | None = Field(default=None, max_length=1000)


class ReviewsRequest(_TravelRequest):
    reviews: list[str] = Field(..., min_length=1, max_length=200)


class PlaceDetailsRequest(_TravelRequest):
    query: str = Field(..., min_length=1, max_length=500)


class NearbyPlacesRequest(_TravelRequest):
    location: str = Field(..., min_length=1, max_length=500)
    radius: float = Field(..., gt=0)
    type: str | None = Field(default=None, max_length=100)


class RouteDetailsRequest(_TravelRequest):
    origin: str = Field(..., min_length=1, max_length=500)
    destination: str = Field(..., min_length=1, max_length=500)
    mode: str | None = Field(default=None, pattern="^(driving|walking|bicycling|transit)$")


class LocalEventsRequest(_TravelRequest):
    destination: str = Field(..., min_length=1, max_length=500)
    start_date: str = Field(..., alias="startDate", min_length=1)
    end_date: str = Field(..., alias="endDate", min_length=1)


class WeatherForecastRequest(_TravelRequest):
    destination: str = Field(..., min_length=1, max_length=500)
    dates: list[str] = Field(..., min_length=1, max_length=16)


class AccessibilityRequest(_TravelRequest):
    places: list[str] = Field(..., min_length=1, max_length=50)

    @field_validator("places")
    @classmethod
    def drop_blank_places(cls, v: list[str]) -> list[str]:
        places = [p for p in v if p]
        if not places:
            raise ValueError("At least one non-empty place is required")
        return places


class TravelResponse(BaseModel):
    data: dict[str, Any]
    message: str


# --- Health ---

class HealthResponse(BaseModel):
    status: str
    version: str
