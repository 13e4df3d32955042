"""
Demonstration flows used by the ``weather`` and ``structured`` commands.

``weather`` walks through one complete tool-calling cycle against the
Open-Meteo forecast API; ``structured`` asks for a schema-constrained
answer and decodes it back into dataclasses.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

import httpx

from aiclient.client import Client
from aiclient.errors import AIClientError, DeserializationError, HTTPStatusError, TransportError
from aiclient.request import ChatCompletionParameter
from aiclient.schema import JsonSchemaDescription, ResponseFormat
from aiclient.tools import Tool, ToolChoice
from aiclient.types import Choice, Message

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"


# ---------------------------------------------------------------------------
# Weather tool
# ---------------------------------------------------------------------------

@dataclass
class WeatherParameter:
    latitude: float = field(metadata={"description": "The latitude of the location."})
    longitude: float = field(metadata={"description": "The longitude of the location."})


WEATHER_TOOL = Tool(
    "get_weather",
    "Get current temperature for a given location.",
    WeatherParameter,
)

WeatherLookup = Callable[[WeatherParameter], Awaitable[float]]


async def get_weather(parameter: WeatherParameter, *, timeout: float = 30.0) -> float:
    """Current temperature (Celsius) at the given coordinates."""
    params = {
        "latitude": parameter.latitude,
        "longitude": parameter.longitude,
        "current": "temperature_2m,wind_speed_10m",
    }
    try:
        async with httpx.AsyncClient(timeout=timeout) as http:
            resp = await http.get(OPEN_METEO_URL, params=params)
    except httpx.TransportError as exc:
        raise TransportError(f"Failed to fetch weather data: {exc}", exc) from exc
    if not resp.is_success:
        logger.error("Weather lookup failed with status %d: %s", resp.status_code, resp.text)
        raise HTTPStatusError(resp.status_code)
    try:
        data = resp.json()
        temperature = float(data["current"]["temperature_2m"])
    except (ValueError, KeyError, TypeError) as exc:
        raise DeserializationError(f"Failed to parse weather data: {exc}") from exc
    logger.info("Weather data: %s", data.get("current"))
    return temperature


async def run_weather_exchange(
    client: Client,
    model: str,
    city: str = "Paris",
    lookup: WeatherLookup = get_weather,
) -> list[Choice]:
    """Ask for the weather, run the requested tool call and send the result back."""
    param = ChatCompletionParameter(
        model, [Message.user(f"What is the weather like in {city} today?")]
    )
    param.add_tool(WEATHER_TOOL)
    param.set_tool_choice(ToolChoice.required())

    choices = await client.chat_completion(param)
    if not choices or not choices[0].message.tool_calls:
        raise AIClientError("Model did not request a tool call")

    assistant = choices[0].message
    param.add_message(assistant)

    for call in assistant.tool_calls:
        logger.info("Tool call: %s(%s)", call.function_call.name, call.function_call.arguments)
        if call.function_call.name != WEATHER_TOOL.name:
            raise AIClientError(f"Unexpected tool call: {call.function_call.name}")
        args = call.parse_arguments()
        try:
            weather_args = WeatherParameter(**args)
        except TypeError as exc:
            raise DeserializationError(f"Arguments do not match get_weather: {exc}") from exc
        temperature = await lookup(weather_args)
        logger.info("Weather result: %s", temperature)
        param.add_message(
            Message.tool(call.id, f"The current temperature is {temperature}°C")
        )

    return await client.chat_completion(param)


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------

@dataclass
class Country:
    name: str
    capital: str
    population: int


@dataclass
class Countries:
    countries: list[Country]

    @classmethod
    def from_json(cls, text: str) -> Countries:
        try:
            data = json.loads(text)
            return cls(countries=[Country(**c) for c in data["countries"]])
        except (ValueError, KeyError, TypeError) as exc:
            raise DeserializationError(f"Response does not match Countries: {exc}") from exc


async def run_structured_example(
    client: Client,
    model: str,
    prompt: str = "Name a few european countries.",
) -> list[tuple[str, Countries]]:
    """Return ``(raw content, parsed value)`` for every choice."""
    param = ChatCompletionParameter(model, [Message.user(prompt)])
    param.set_response_format(
        ResponseFormat(JsonSchemaDescription.for_shape("Countries", Countries))
    )
    choices = await client.chat_completion(param)
    return [(c.message.content, Countries.from_json(c.message.content)) for c in choices]
