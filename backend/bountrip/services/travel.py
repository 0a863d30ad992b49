import json
import logging
from dataclasses import dataclass

from bountrip.config import settings
from bountrip.prompts import travel as prompts
from bountrip.services.errors import LLMError
from bountrip.services.llm import LLMDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TravelTask:
    schema_name: str
    system_prompt: str
    schema: dict


TAGS = TravelTask("travel_tags", prompts.TAGS_SYSTEM_PROMPT, prompts.TAGS_SCHEMA)
DESCRIPTION = TravelTask(
    "place_description", prompts.DESCRIPTION_SYSTEM_PROMPT, prompts.DESCRIPTION_SCHEMA
)
ITINERARY = TravelTask(
    "travel_itinerary", prompts.ITINERARY_SYSTEM_PROMPT, prompts.ITINERARY_SCHEMA
)
BUDGET = TravelTask("travel_budget", prompts.BUDGET_SYSTEM_PROMPT, prompts.BUDGET_SCHEMA)
ACTIVITIES = TravelTask(
    "recommended_activities", prompts.ACTIVITIES_SYSTEM_PROMPT, prompts.ACTIVITIES_SCHEMA
)
ACCOMMODATION = TravelTask(
    "suggested_accommodations",
    prompts.ACCOMMODATION_SYSTEM_PROMPT,
    prompts.ACCOMMODATION_SCHEMA,
)
REVIEWS = TravelTask("reviews_analysis", prompts.REVIEWS_SYSTEM_PROMPT, prompts.REVIEWS_SCHEMA)
PLACE_DETAILS = TravelTask(
    "place_details", prompts.PLACE_DETAILS_SYSTEM_PROMPT, prompts.PLACE_DETAILS_SCHEMA
)
NEARBY_PLACES = TravelTask(
    "nearby_places", prompts.NEARBY_PLACES_SYSTEM_PROMPT, prompts.NEARBY_PLACES_SCHEMA
)
ROUTE_DETAILS = TravelTask(
    "route_details", prompts.ROUTE_DETAILS_SYSTEM_PROMPT, prompts.ROUTE_DETAILS_SCHEMA
)
LOCAL_EVENTS = TravelTask(
    "local_events", prompts.LOCAL_EVENTS_SYSTEM_PROMPT, prompts.LOCAL_EVENTS_SCHEMA
)
WEATHER_FORECAST = TravelTask(
    "weather_forecast",
    prompts.WEATHER_FORECAST_SYSTEM_PROMPT,
    prompts.WEATHER_FORECAST_SCHEMA,
)
ACCESSIBILITY = TravelTask(
    "accessibility_info", prompts.ACCESSIBILITY_SYSTEM_PROMPT, prompts.ACCESSIBILITY_SCHEMA
)


async def run_task(dispatcher: LLMDispatcher, task: TravelTask, prompt: str) -> dict:
    """Run a structured-output travel task and return the parsed JSON."""
    content = await dispatcher.complete(
        model=settings.travel_model,
        system=task.system_prompt,
        prompt=prompt,
        json_schema_name=task.schema_name,
        json_schema=task.schema,
    )
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.error("%s returned invalid JSON: %s", task.schema_name, content)
        raise LLMError(f"Invalid JSON from LLM service for {task.schema_name}") from exc
    logger.info("%s completed", task.schema_name)
    return parsed


async def generate_tags(dispatcher: LLMDispatcher, text: str) -> dict:
    return await run_task(dispatcher, TAGS, text)


async def generate_description(dispatcher: LLMDispatcher, place: str) -> dict:
    return await run_task(dispatcher, DESCRIPTION, f"Describe the following place for travelers: {place}")


async def generate_itinerary(
    dispatcher: LLMDispatcher, destination: str, duration: float, preferences: str | None = None
) -> dict:
    prompt = (
        f"Plan a trip to {destination} for {duration:g} days. "
        f"Preferences: {preferences or 'None'}. "
        "Provide place_id and details matching Google Places API."
    )
    return await run_task(dispatcher, ITINERARY, prompt)


async def estimate_budget(
    dispatcher: LLMDispatcher, destination: str, duration: float, travel_style: str
) -> dict:
    prompt = (
        f"Calculate the budget for a trip to {destination} for {duration:g} days "
        f'with a "{travel_style}" travel style'
    )
    return await run_task(dispatcher, BUDGET, prompt)


async def recommend_activities(
    dispatcher: LLMDispatcher, destination: str, interests: list[str]
) -> dict:
    prompt = (
        f"Recommend activities in {destination} that align with the following "
        f"interests: {', '.join(interests)}. "
        "Provide place_id and details matching Google Places API."
    )
    return await run_task(dispatcher, ACTIVITIES, prompt)


async def suggest_accommodation(
    dispatcher: LLMDispatcher,
    destination: str,
    check_in: str,
    check_out: str,
    preferences: str | None = None,
) -> dict:
    prompt = (
        f"Suggest accommodations in {destination} for the dates {check_in} to {check_out}. "
        f"Preferences: {preferences or 'None'}. "
        "Provide place_id and details matching Google Places API."
    )
    return await run_task(dispatcher, ACCOMMODATION, prompt)


async def analyze_reviews(dispatcher: LLMDispatcher, reviews: list[str]) -> dict:
    prompt = (
        "Analyze the following user reviews and provide sentiment analysis, "
        "common themes, and average rating:\n\n" + "\n".join(reviews)
    )
    return await run_task(dispatcher, REVIEWS, prompt)


async def get_place_details(dispatcher: LLMDispatcher, query: str) -> dict:
    return await run_task(
        dispatcher, PLACE_DETAILS, f"Provide place details for the following query: {query}"
    )


async def get_nearby_places(
    dispatcher: LLMDispatcher, location: str, radius: float, place_type: str | None = None
) -> dict:
    prompt = (
        f"List nearby {place_type or 'points of interest'} around {location} "
        f"within a radius of {radius:g} meters."
    )
    return await run_task(dispatcher, NEARBY_PLACES, prompt)


async def get_route_details(
    dispatcher: LLMDispatcher, origin: str, destination: str, mode: str | None = None
) -> dict:
    prompt = f"Provide route details from {origin} to {destination} by {mode or 'driving'}."
    return await run_task(dispatcher, ROUTE_DETAILS, prompt)


async def get_local_events(
    dispatcher: LLMDispatcher, destination: str, start_date: str, end_date: str
) -> dict:
    prompt = f"List events happening in {destination} from {start_date} to {end_date}."
    return await run_task(dispatcher, LOCAL_EVENTS, prompt)


async def get_weather_forecast(
    dispatcher: LLMDispatcher, destination: str, dates: list[str]
) -> dict:
    prompt = f"Provide weather forecast for {destination} on the following dates: {', '.join(dates)}."
    return await run_task(dispatcher, WEATHER_FORECAST, prompt)


async def get_accessibility_info(dispatcher: LLMDispatcher, places: list[str]) -> dict:
    prompt = f"Provide accessibility details for the following places: {', '.join(places)}."
    return await run_task(dispatcher, ACCESSIBILITY, prompt)
