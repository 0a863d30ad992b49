"""Unit tests for the structured travel tasks."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from bountrip.config import settings
from bountrip.services import travel
from bountrip.services.errors import LLMError, RequestFailed, ResponseRefused


def _dispatcher(content: str | None = None, error: Exception | None = None) -> MagicMock:
    dispatcher = MagicMock()
    if error is not None:
        dispatcher.complete = AsyncMock(side_effect=error)
    else:
        dispatcher.complete = AsyncMock(return_value=content)
    return dispatcher


def _sent(dispatcher: MagicMock) -> dict:
    return dispatcher.complete.await_args.kwargs


class TestTravelTasks:

    @pytest.mark.asyncio
    async def test_generate_tags(self):
        dispatcher = _dispatcher(json.dumps({"tags": ["beaches", "food"]}))

        result = await travel.generate_tags(dispatcher, "I love seafood and the sea")

        assert result == {"tags": ["beaches", "food"]}
        sent = _sent(dispatcher)
        assert sent["model"] == settings.travel_model
        assert sent["prompt"] == "I love seafood and the sea"
        assert sent["system"] == travel.TAGS.system_prompt
        assert sent["json_schema_name"] == "travel_tags"
        assert sent["json_schema"]["required"] == ["tags"]

    @pytest.mark.asyncio
    async def test_itinerary_prompt(self):
        dispatcher = _dispatcher(json.dumps({"itinerary": []}))

        await travel.generate_itinerary(dispatcher, "Lisbon", 3)

        assert _sent(dispatcher)["prompt"] == (
            "Plan a trip to Lisbon for 3 days. Preferences: None. "
            "Provide place_id and details matching Google Places API."
        )
        assert _sent(dispatcher)["json_schema_name"] == "travel_itinerary"

    @pytest.mark.asyncio
    async def test_budget_prompt(self):
        dispatcher = _dispatcher(json.dumps({"estimatedBudget": {}, "total": 0}))

        await travel.estimate_budget(dispatcher, "Kyoto", 5.5, "luxury")

        assert _sent(dispatcher)["prompt"] == (
            'Calculate the budget for a trip to Kyoto for 5.5 days with a "luxury" travel style'
        )

    @pytest.mark.asyncio
    async def test_reviews_joined_by_line(self):
        dispatcher = _dispatcher(json.dumps({"commonThemes": []}))

        await travel.analyze_reviews(dispatcher, ["Great view", "Noisy at night"])

        assert _sent(dispatcher)["prompt"].endswith(":\n\nGreat view\nNoisy at night")

    @pytest.mark.asyncio
    async def test_nearby_places_defaults(self):
        dispatcher = _dispatcher(json.dumps({"places": []}))

        await travel.get_nearby_places(dispatcher, "Plaza Mayor, Madrid", 500)

        assert _sent(dispatcher)["prompt"] == (
            "List nearby points of interest around Plaza Mayor, Madrid within a radius of 500 meters."
        )

    @pytest.mark.asyncio
    async def test_route_default_mode(self):
        dispatcher = _dispatcher(json.dumps({"routes": []}))

        await travel.get_route_details(dispatcher, "Porto", "Braga")

        assert _sent(dispatcher)["prompt"] == "Provide route details from Porto to Braga by driving."

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        dispatcher = _dispatcher("Sure! Here are your tags: beaches")

        with pytest.raises(LLMError, match="Invalid JSON"):
            await travel.generate_tags(dispatcher, "beach")

    @pytest.mark.asyncio
    async def test_refusal(self):
        dispatcher = _dispatcher(error=ResponseRefused("I can't help with that request."))

        with pytest.raises(ResponseRefused):
            await travel.get_place_details(dispatcher, "somewhere")

    @pytest.mark.asyncio
    async def test_request_failure_propagates(self):
        dispatcher = _dispatcher(error=RequestFailed("openai returned 503", 503))

        with pytest.raises(RequestFailed):
            await travel.get_weather_forecast(dispatcher, "Oslo", ["2026-12-01"])

    def test_schema_names_unique(self):
        tasks = [v for v in vars(travel).values() if isinstance(v, travel.TravelTask)]

        assert len(tasks) == 13
        assert len({t.schema_name for t in tasks}) == 13
        for task in tasks:
            assert task.schema["type"] == "object"
            assert task.schema["additionalProperties"] is False
