import logging
from collections.abc import AsyncIterator, Awaitable

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse

from bountrip.config import settings
from bountrip.dependencies import get_dispatcher
from bountrip.middleware.rate_limit import limiter
from bountrip.models.schemas import (
    AccessibilityRequest,
    AccommodationRequest,
    ActivitiesRequest,
    BudgetRequest,
    ChatRequest,
    DescriptionRequest,
    ItineraryRequest,
    LocalEventsRequest,
    NearbyPlacesRequest,
    PlaceDetailsRequest,
    ReviewsRequest,
    RouteDetailsRequest,
    TagsRequest,
    TravelResponse,
    WeatherForecastRequest,
)
from bountrip.services import travel
from bountrip.services.errors import (
    InvalidLLMRequest,
    LLMError,
    MissingAuthToken,
    ModelNotFound,
    ResponseRefused,
)
from bountrip.services.llm import LLMDispatcher, response_json

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ai", tags=["ai"])


def _http_error(exc: LLMError) -> HTTPException:
    """Map an LLM failure to the HTTP status the client sees."""
    if isinstance(exc, InvalidLLMRequest):
        status_code = 400
    elif isinstance(exc, ResponseRefused):
        status_code = 403
    elif isinstance(exc, (ModelNotFound, MissingAuthToken)):
        status_code = 500
    else:
        status_code = 502
    return HTTPException(status_code=status_code, detail=str(exc))


async def _respond(call: Awaitable[dict], message: str, failure: str) -> TravelResponse:
    try:
        data = await call
    except LLMError as exc:
        logger.error("%s: %s", failure, exc)
        raise _http_error(exc) from exc
    return TravelResponse(data=data, message=message)


async def _relay(resp: httpx.Response) -> AsyncIterator[bytes]:
    """Pass the provider's event stream through, decoded of any content-encoding."""
    try:
        async for chunk in resp.aiter_bytes():
            yield chunk
    except httpx.HTTPError as exc:
        logger.error("Provider stream interrupted: %s", exc)
    finally:
        await resp.aclose()


# ---------------------------------------------------------------------------
# Generic chat
# ---------------------------------------------------------------------------

@router.post("/chat")
@limiter.limit(settings.ai_rate_limit)
async def chat(
    request: Request,
    body: ChatRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    """Send a conversation to the model's provider and return its raw reply."""
    try:
        resp = await dispatcher.send_message(
            model=body.model,
            prompt=body.prompt,
            system=body.system,
            history=body.history_messages(),
            stream=body.stream,
            temperature=body.temperature,
            max_tokens=body.max_tokens,
            top_p=body.top_p,
            frequency_penalty=body.frequency_penalty,
            presence_penalty=body.presence_penalty,
            stop=body.stop,
            tools=body.tools,
            tool_choice=body.tool_choice,
            json_schema_name=body.json_schema_name,
            json_schema=body.json_schema,
        )
    except LLMError as exc:
        logger.error("Chat request for %s failed: %s", body.model, exc)
        raise _http_error(exc) from exc

    if body.stream:
        return StreamingResponse(
            _relay(resp),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )
    try:
        data = response_json(resp)
    except LLMError as exc:
        logger.error("Chat reply for %s unusable: %s", body.model, exc)
        raise _http_error(exc) from exc
    return JSONResponse(data)


# ---------------------------------------------------------------------------
# Structured travel tasks
# ---------------------------------------------------------------------------

@router.post("/tags", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def generate_tags(
    request: Request,
    body: TagsRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    """Extract travel interest tags from free text."""
    return await _respond(
        travel.generate_tags(dispatcher, body.input),
        "Tags generated successfully.",
        "Error generating tags.",
    )


@router.post("/description", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def generate_description(
    request: Request,
    body: DescriptionRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.generate_description(dispatcher, body.place),
        "Description generated successfully.",
        "Error generating description.",
    )


@router.post("/itinerary", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def generate_itinerary(
    request: Request,
    body: ItineraryRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    """Day-by-day itinerary with Google Places compatible activities."""
    return await _respond(
        travel.generate_itinerary(dispatcher, body.input, body.duration, body.preferences),
        "Itinerary generated successfully.",
        "Error generating itinerary.",
    )


@router.post("/budget", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def estimate_budget(
    request: Request,
    body: BudgetRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.estimate_budget(dispatcher, body.destination, body.duration, body.travel_style),
        "Budget estimated successfully.",
        "Error estimating budget.",
    )


@router.post("/activities", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def recommend_activities(
    request: Request,
    body: ActivitiesRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.recommend_activities(dispatcher, body.destination, body.interests),
        "Activities recommended successfully.",
        "Error recommending activities.",
    )


@router.post("/accommodation", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def suggest_accommodation(
    request: Request,
    body: AccommodationRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.suggest_accommodation(
            dispatcher, body.destination, body.check_in, body.check_out, body.preferences,
        ),
        "Accommodations suggested successfully.",
        "Error suggesting accommodation.",
    )


@router.post("/reviews", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def analyze_reviews(
    request: Request,
    body: ReviewsRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    """Sentiment, common themes and average rating for a batch of reviews."""
    return await _respond(
        travel.analyze_reviews(dispatcher, body.reviews),
        "Reviews analyzed successfully.",
        "Error analyzing reviews.",
    )


@router.post("/place-details", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def get_place_details(
    request: Request,
    body: PlaceDetailsRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.get_place_details(dispatcher, body.query),
        "Place details retrieved successfully.",
        "Error retrieving place details.",
    )


@router.post("/nearby-places", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def get_nearby_places(
    request: Request,
    body: NearbyPlacesRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.get_nearby_places(dispatcher, body.location, body.radius, body.type),
        "Nearby places retrieved successfully.",
        "Error retrieving nearby places.",
    )


@router.post("/route-details", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def get_route_details(
    request: Request,
    body: RouteDetailsRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.get_route_details(dispatcher, body.origin, body.destination, body.mode),
        "Route details retrieved successfully.",
        "Error retrieving route details.",
    )


@router.post("/local-events", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def get_local_events(
    request: Request,
    body: LocalEventsRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.get_local_events(dispatcher, body.destination, body.start_date, body.end_date),
        "Local events retrieved successfully.",
        "Error retrieving local events.",
    )


@router.post("/weather-forecast", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def get_weather_forecast(
    request: Request,
    body: WeatherForecastRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.get_weather_forecast(dispatcher, body.destination, body.dates),
        "Weather forecast retrieved successfully.",
        "Error retrieving weather forecast.",
    )


@router.post("/accessibility-info", response_model=TravelResponse)
@limiter.limit(settings.ai_rate_limit)
async def get_accessibility_info(
    request: Request,
    body: AccessibilityRequest,
    dispatcher: LLMDispatcher = Depends(get_dispatcher),
):
    return await _respond(
        travel.get_accessibility_info(dispatcher, body.places),
        "Accessibility information retrieved successfully.",
        "Error retrieving accessibility information.",
    )
