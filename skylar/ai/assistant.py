"""Skylar chat assistant: weather-grounded answers with canned fallbacks."""

import logging
from dataclasses import dataclass

from skylar.ai.classifier import contains_invalid_content, is_weather_question
from skylar.ai.gemini_client import GeminiClient
from skylar.errors import AiGenerationError
from skylar.models.common import Units, local_datetime
from skylar.models.weather import ForecastBundle

logger = logging.getLogger(__name__)

FAILURE_THRESHOLD = 3
CONTEXT_HOURLY_POINTS = 3

OFF_TOPIC_REPLY = (
    "I'm your weather assistant. I can only answer questions related to weather, "
    "forecasts, climate, or outdoor planning. Please ask me about the weather or "
    "how it might affect your plans!"
)
INVALID_CONTENT_REPLY = "Please avoid using inappropriate language or special commands."
NO_DATA_NOTE = "Note: I don't have current weather data for your location at the moment."

# Canned replies by AiGenerationError.reason
FAILURE_REPLIES = {
    "missing_key": (
        "I'm unable to access my weather brain right now. "
        "Please check your API configuration."
    ),
    "auth": (
        "I can't connect to my weather intelligence service due to authentication "
        "issues. Please check your API configuration."
    ),
    "timeout": "My weather service is taking too long to respond. Let's try again in a moment!",
    "network": (
        "I'm having trouble connecting to my weather information service. "
        "Please check your internet connection and try again."
    ),
    "empty": (
        "I'm having trouble understanding the weather data right now. "
        "Let me try to answer based on general knowledge instead."
    ),
}
DEFAULT_FAILURE_REPLY = (
    "I'm having trouble processing your weather question right now. "
    "Please try again in a moment."
)

# Offline replies used after repeated failures, matched by keyword
OFFLINE_REPLIES = {
    "rain": "I can't check for rain data at the moment, but I recommend checking your local weather service.",
    "temperature": "I'm not able to retrieve temperature data right now. Please try asking again later.",
    "forecast": "I'm unable to access forecast information right now. Please check back soon.",
    "today": "I can't retrieve today's weather information right now. Please try again later.",
}
OFFLINE_DEFAULT = (
    "I can provide general weather information, but I don't have access to "
    "real-time data right now. Please try again later."
)


@dataclass(frozen=True)
class AssistantReply:
    text: str
    is_weather_related: bool
    fallback: bool = False


def offline_reply(question: str) -> str:
    lowered = question.lower()
    if "rain" in lowered:
        return OFFLINE_REPLIES["rain"]
    if any(word in lowered for word in ("temperature", "hot", "cold")):
        return OFFLINE_REPLIES["temperature"]
    if "forecast" in lowered:
        return OFFLINE_REPLIES["forecast"]
    if "today" in lowered:
        return OFFLINE_REPLIES["today"]
    return OFFLINE_DEFAULT


def unit_labels(units: Units) -> tuple[str, str]:
    """(temperature symbol, wind speed unit)."""
    if units == Units.IMPERIAL:
        return "F", "mph"
    if units == Units.STANDARD:
        return "K", "m/s"
    return "C", "m/s"


def build_weather_context(
    bundle: ForecastBundle | None,
    units: Units = Units.METRIC,
    location: str | None = None,
) -> str:
    if bundle is None:
        return NO_DATA_NOTE

    w = bundle.current
    temp_unit, wind_unit = unit_labels(units)
    place = location or w.location or "the user's location"
    lines = [
        f"Current weather in {place}:",
        f"- Temperature: {w.temperature}°{temp_unit} (feels like {w.feels_like}°{temp_unit})",
        f"- Conditions: {w.description}",
        f"- Humidity: {w.humidity}%",
        f"- Wind: {w.wind_speed} {wind_unit} {w.wind_direction}°",
    ]
    if bundle.hourly:
        lines.append("")
        lines.append("Forecast for the next hours:")
        for point in bundle.hourly[:CONTEXT_HOURLY_POINTS]:
            at = local_datetime(point.timestamp, bundle.timezone).strftime("%H:%M")
            lines.append(
                f"- {at}: {point.condition.description}, {point.temp}°{temp_unit}"
            )
    return "\n".join(lines)


def build_prompt(question: str, context: str) -> str:
    return (
        "As Skylar, an AI weather assistant in a mobile app, answer this "
        "weather-related question with helpful information.\n"
        "Use this weather data to inform your response:\n"
        f"{context}\n\n"
        f'User question: "{question}"\n\n'
        "Keep responses concise and focused on weather insights. If the weather "
        "data doesn't directly answer the question, you can provide general "
        "weather advice but make it clear you're not using real-time data for "
        "that specific question."
    )


class WeatherAssistant:
    """Answers chat questions. Never returns blank text.

    After FAILURE_THRESHOLD consecutive generation failures the assistant
    stops calling the endpoint and answers from OFFLINE_REPLIES until a
    ``reset()``.
    """

    def __init__(
        self,
        client: GeminiClient | None,
        units: Units = Units.METRIC,
        classify_timeout: float = 5.0,
        temperature: float = 0.7,
        max_output_tokens: int = 100,
    ):
        self.client = client
        self.units = Units(units)
        self.classify_timeout = classify_timeout
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.failure_count = 0

    def reset(self) -> None:
        self.failure_count = 0

    async def ask(
        self,
        question: str,
        bundle: ForecastBundle | None = None,
        location: str | None = None,
    ) -> AssistantReply:
        question = question.strip()
        if not question:
            return AssistantReply(text=OFF_TOPIC_REPLY, is_weather_related=False)
        if contains_invalid_content(question):
            return AssistantReply(text=INVALID_CONTENT_REPLY, is_weather_related=False)

        if self.failure_count >= FAILURE_THRESHOLD:
            logger.info("Assistant offline after %d failures", self.failure_count)
            return AssistantReply(
                text=offline_reply(question), is_weather_related=True, fallback=True
            )

        if not await is_weather_question(question, self.client, self.classify_timeout):
            return AssistantReply(text=OFF_TOPIC_REPLY, is_weather_related=False)

        prompt = build_prompt(question, build_weather_context(bundle, self.units, location))
        try:
            text = await self.generate(prompt)
        except AiGenerationError as e:
            return self._failure_reply(e)
        return AssistantReply(text=text, is_weather_related=True)

    async def generate(self, prompt: str, max_output_tokens: int | None = None) -> str:
        """Raw generation with failure accounting. Raises AiGenerationError."""
        if self.client is None:
            self.failure_count += 1
            raise AiGenerationError("No AI client configured", reason="missing_key")
        try:
            text = await self.client.generate(
                prompt,
                temperature=self.temperature,
                max_output_tokens=max_output_tokens or self.max_output_tokens,
            )
        except AiGenerationError:
            self.failure_count += 1
            raise
        self.failure_count = 0
        return text

    def _failure_reply(self, error: AiGenerationError) -> AssistantReply:
        logger.warning("AI generation failed (%s): %s", error.reason, error)
        text = FAILURE_REPLIES.get(error.reason, DEFAULT_FAILURE_REPLY)
        # Empty-response fallback still answers the weather question
        return AssistantReply(
            text=text, is_weather_related=error.reason == "empty", fallback=True
        )
