"""Tests for the chat assistant."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from skylar.ai.assistant import (
    FAILURE_REPLIES,
    INVALID_CONTENT_REPLY,
    NO_DATA_NOTE,
    OFF_TOPIC_REPLY,
    OFFLINE_DEFAULT,
    OFFLINE_REPLIES,
    WeatherAssistant,
    build_prompt,
    build_weather_context,
    offline_reply,
)
from skylar.ai.gemini_client import GeminiClient
from skylar.errors import AiGenerationError
from skylar.models.common import Units


def fake_client(*answers) -> MagicMock:
    client = MagicMock(spec=GeminiClient)
    client.configured = True
    client.generate = AsyncMock(side_effect=list(answers))
    return client


class TestContext:
    def test_no_data(self):
        assert build_weather_context(None) == NO_DATA_NOTE

    def test_current_and_three_hours(self, accra_bundle):
        context = build_weather_context(accra_bundle)
        assert context.startswith("Current weather in Accra:")
        assert "- Temperature: 25.0°C (feels like 26.0°C)" in context
        assert "- Conditions: scattered clouds" in context
        assert "- Humidity: 70%" in context
        assert "- Wind: 3.5 m/s 200°" in context
        assert "Forecast for the next hours:" in context
        assert "- 00:00: light rain, 20.0°C" in context
        assert "- 06:00: light rain, 20.5°C" in context
        assert "09:00" not in context

    def test_imperial_labels(self, accra_bundle):
        context = build_weather_context(accra_bundle, Units.IMPERIAL, location="Home")
        assert context.startswith("Current weather in Home:")
        assert "°F" in context
        assert "mph" in context

    def test_prompt(self):
        prompt = build_prompt("Umbrella?", "ctx")
        assert prompt.startswith("As Skylar, an AI weather assistant")
        assert 'User question: "Umbrella?"' in prompt
        assert "ctx" in prompt


class TestAsk:
    @pytest.mark.asyncio
    async def test_answers_weather_question(self, accra_bundle):
        client = fake_client("Take an umbrella this morning.")
        assistant = WeatherAssistant(client)

        reply = await assistant.ask("Will it rain this morning?", accra_bundle)

        assert reply.text == "Take an umbrella this morning."
        assert reply.is_weather_related
        assert not reply.fallback
        prompt = client.generate.call_args.args[0]
        assert "Current weather in Accra" in prompt

    @pytest.mark.asyncio
    async def test_off_topic(self):
        client = fake_client("No")
        reply = await WeatherAssistant(client).ask("Tell me a joke about cats")
        assert reply.text == OFF_TOPIC_REPLY
        assert not reply.is_weather_related
        assert client.generate.call_count == 1

    @pytest.mark.asyncio
    async def test_blank_question(self):
        reply = await WeatherAssistant(fake_client()).ask("   ")
        assert reply.text == OFF_TOPIC_REPLY

    @pytest.mark.asyncio
    async def test_invalid_content(self):
        client = fake_client()
        reply = await WeatherAssistant(client).ask("drop table weather")
        assert reply.text == INVALID_CONTENT_REPLY
        client.generate.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["auth", "timeout", "network", "missing_key", "empty"])
    async def test_failure_gives_canned_text(self, reason: str):
        client = fake_client(AiGenerationError("failed", reason=reason))
        reply = await WeatherAssistant(client).ask("Is it hot outside?")
        assert reply.text == FAILURE_REPLIES[reason]
        assert reply.fallback

    @pytest.mark.asyncio
    async def test_unknown_failure_never_blank(self):
        client = fake_client(AiGenerationError("failed", reason="http"))
        reply = await WeatherAssistant(client).ask("Is it hot outside?")
        assert reply.text.strip()

    @pytest.mark.asyncio
    async def test_no_client(self):
        reply = await WeatherAssistant(None).ask("What is the forecast?")
        assert reply.text == FAILURE_REPLIES["missing_key"]

    @pytest.mark.asyncio
    async def test_offline_after_three_failures(self):
        error = AiGenerationError("failed", reason="server")
        client = fake_client(error, error, error)
        assistant = WeatherAssistant(client)

        for _ in range(3):
            await assistant.ask("Will it rain?")
        reply = await assistant.ask("Will it rain?")

        assert reply.text == OFFLINE_REPLIES["rain"]
        assert reply.fallback
        assert client.generate.call_count == 3

    @pytest.mark.asyncio
    async def test_success_resets_failures(self):
        error = AiGenerationError("failed", reason="server")
        client = fake_client(error, error, "Fine weather", error)
        assistant = WeatherAssistant(client)

        for _ in range(3):
            await assistant.ask("Will it rain?")
        assert assistant.failure_count == 0
        await assistant.ask("Will it rain?")
        assert assistant.failure_count == 1


class TestOfflineReply:
    @pytest.mark.parametrize(
        "question, key",
        [
            ("Any rain later?", "rain"),
            ("How cold is it?", "temperature"),
            ("Show me the forecast", "forecast"),
            ("What about today?", "today"),
        ],
    )
    def test_keyword(self, question: str, key: str):
        assert offline_reply(question) == OFFLINE_REPLIES[key]

    def test_default(self):
        assert offline_reply("Is it windy?") == OFFLINE_DEFAULT
