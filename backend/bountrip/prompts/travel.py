"""System prompts and strict JSON schemas for the travel assistant tasks.

Place-shaped results follow the Google Places / Directions field names so
the frontend can hand them straight to the maps SDK.
"""


def _object(properties: dict, required: list[str] | None = None) -> dict:
    return {
        "type": "object",
        "properties": properties,
        "required": required if required is not None else list(properties),
        "additionalProperties": False,
    }


def _array(items: dict) -> dict:
    return {"type": "array", "items": items}


_STRING = {"type": "string"}
_NUMBER = {"type": "number"}
_INTEGER = {"type": "integer"}
_BOOLEAN = {"type": "boolean"}
_STRINGS = _array(_STRING)

_LAT_LNG = _object({"lat": _NUMBER, "lng": _NUMBER})
_GEOMETRY = _object({"location": _LAT_LNG})
_TEXT_VALUE = _object({"text": _STRING, "value": _NUMBER})


TAGS_SYSTEM_PROMPT = "Extract travel interest tags based on the user input."

TAGS_SCHEMA = _object({"tags": _STRINGS})


DESCRIPTION_SYSTEM_PROMPT = """\
Write an engaging, accurate travel description of the place given by the user. \
Keep it factual and mention what makes the place worth visiting.\
"""

DESCRIPTION_SCHEMA = _object({
    "name": _STRING,
    "description": _STRING,
    "highlights": _STRINGS,
})


ITINERARY_SYSTEM_PROMPT = (
    "Generate a detailed travel itinerary based on the user input. "
    "Use place details compatible with Google Places API."
)

ITINERARY_SCHEMA = _object({
    "itinerary": _array(_object({
        "day": _INTEGER,
        "activities": _array(_object({
            "place_id": _STRING,
            "name": _STRING,
            "types": _STRINGS,
            "formatted_address": _STRING,
            "geometry": _GEOMETRY,
        })),
    })),
})


BUDGET_SYSTEM_PROMPT = "Calculate a detailed budget for a trip based on user input."

BUDGET_SCHEMA = _object({
    "estimatedBudget": _object({
        "accommodation": _NUMBER,
        "food": _NUMBER,
        "transportation": _NUMBER,
        "activities": _NUMBER,
        "miscellaneous": _NUMBER,
    }),
    "total": _NUMBER,
})


ACTIVITIES_SYSTEM_PROMPT = (
    "Recommend tourist activities based on user input. "
    "Provide place details compatible with Google Places API."
)

ACTIVITIES_SCHEMA = _object({
    "activities": _array(_object(
        {
            "place_id": _STRING,
            "name": _STRING,
            "types": _STRINGS,
            "formatted_address": _STRING,
            "rating": _NUMBER,
            "user_ratings_total": _INTEGER,
            "geometry": _GEOMETRY,
        },
        required=["place_id", "name", "types", "formatted_address", "geometry"],
    )),
})


ACCOMMODATION_SYSTEM_PROMPT = (
    "Suggest accommodation options based on user input. "
    "Provide place details compatible with Google Places API."
)

ACCOMMODATION_SCHEMA = _object({
    "accommodations": _array(_object(
        {
            "place_id": _STRING,
            "name": _STRING,
            "formatted_address": _STRING,
            "rating": _NUMBER,
            "user_ratings_total": _INTEGER,
            "price_level": _INTEGER,
            "types": _STRINGS,
            "geometry": _GEOMETRY,
        },
        required=["place_id", "name", "formatted_address", "geometry"],
    )),
})


REVIEWS_SYSTEM_PROMPT = "Analyze user reviews and extract relevant insights."

REVIEWS_SCHEMA = _object({
    "sentimentAnalysis": _object({
        "positive": _NUMBER,
        "neutral": _NUMBER,
        "negative": _NUMBER,
    }),
    "commonThemes": _STRINGS,
    "averageRating": _NUMBER,
})


PLACE_DETAILS_SYSTEM_PROMPT = (
    "Provide detailed place information compatible with Google Places API "
    "based on user query."
)

PLACE_DETAILS_SCHEMA = _object({
    "places": _array(_object({
        "place_id": _STRING,
        "name": _STRING,
        "formatted_address": _STRING,
        "geometry": _GEOMETRY,
        "types": _STRINGS,
    })),
})


NEARBY_PLACES_SYSTEM_PROMPT = (
    "Provide a list of nearby places compatible with Google Places API "
    "based on user input."
)

NEARBY_PLACES_SCHEMA = _object({
    "places": _array(_object({
        "place_id": _STRING,
        "name": _STRING,
        "vicinity": _STRING,
        "geometry": _GEOMETRY,
        "types": _STRINGS,
    })),
})


ROUTE_DETAILS_SYSTEM_PROMPT = (
    "Provide route details compatible with Google Directions API based on user input."
)

ROUTE_DETAILS_SCHEMA = _object({
    "routes": _array(_object({
        "summary": _STRING,
        "legs": _array(_object({
            "distance": _TEXT_VALUE,
            "duration": _TEXT_VALUE,
            "start_address": _STRING,
            "end_address": _STRING,
            "steps": _array(_object({
                "travel_mode": _STRING,
                "start_location": _LAT_LNG,
                "end_location": _LAT_LNG,
                "polyline": _object({"points": _STRING}),
                "duration": _TEXT_VALUE,
                "html_instructions": _STRING,
            })),
        })),
    })),
})


LOCAL_EVENTS_SYSTEM_PROMPT = (
    "Provide local event information compatible with event data structure "
    "based on user input."
)

LOCAL_EVENTS_SCHEMA = _object({
    "events": _array(_object({
        "event_id": _STRING,
        "name": _STRING,
        "description": _STRING,
        "start_time": {"type": "string", "format": "date-time"},
        "end_time": {"type": "string", "format": "date-time"},
        "location": _object({
            "name": _STRING,
            "address": _STRING,
            "lat": _NUMBER,
            "lng": _NUMBER,
        }),
        "types": _STRINGS,
    })),
})


WEATHER_FORECAST_SYSTEM_PROMPT = (
    "Provide weather forecast information compatible with weather data "
    "structure based on user input."
)

WEATHER_FORECAST_SCHEMA = _object({
    "weather_forecast": _array(_object({
        "date": {"type": "string", "format": "date"},
        "temperature": _object({"min": _NUMBER, "max": _NUMBER}),
        "weather": _STRING,
        "humidity": _NUMBER,
        "wind_speed": _NUMBER,
    })),
})


ACCESSIBILITY_SYSTEM_PROMPT = "Provide accessibility information for the given places."

ACCESSIBILITY_SCHEMA = _object({
    "accessibility_info": _array(_object({
        "place_id": _STRING,
        "name": _STRING,
        "wheelchair_accessible": _BOOLEAN,
        "braille_signs": _BOOLEAN,
        "hearing_assistance": _BOOLEAN,
        "description": _STRING,
    })),
})
