"""Decide whether a chat question is about weather, and screen abusive input."""

import logging
import re

from skylar.ai.gemini_client import GeminiClient
from skylar.errors import AiGenerationError

logger = logging.getLogger(__name__)

WEATHER_KEYWORDS = (
    "weather", "rain", "temperature", "hot", "cold", "sunny", "cloudy",
    "forecast", "humidity", "storm", "wind", "precipitation", "climate",
    "snow", "umbrella", "celsius", "fahrenheit", "degrees", "sunrise", "sunset",
    "outside", "jacket", "wear", "clothing", "outdoor", "activity", "commute",
    "travel", "walk", "bike", "drive", "transport", "visibility", "air quality",
)

CLASSIFY_PROMPT = (
    'Is the query "{query}" related to weather, climate, or outdoor activities? '
    "Answer Yes or No."
)

_INVALID_PATTERNS = [
    re.compile(r"\b(f[*\s]?[u*\s]c?k|sh[i*\s]t|b[i*\s]tch|d[i*\s]ck|\bc[*\s]?u[*\s]?n[*\s]?t)\b", re.I),
    re.compile(r"\b(curl|wget|exec|eval|system|passthru|shell_exec)\b", re.I),
    re.compile(
        r"\b(select\s+\S+\s+from|insert\s+into|update\s+\S+\s+set|delete\s+from|drop\s+table|union\s+select)\b",
        re.I,
    ),
]


def matching_keyword(query: str) -> str | None:
    lowered = query.lower()
    for keyword in WEATHER_KEYWORDS:
        if keyword in lowered:
            return keyword
    return None


def contains_invalid_content(text: str) -> bool:
    """Offensive language, shell commands or SQL fragments."""
    return any(p.search(text) for p in _INVALID_PATTERNS)


async def is_weather_question(
    query: str, client: GeminiClient | None = None, timeout: float = 5.0
) -> bool:
    """Keyword match first, then a short classification call.

    Any doubt resolves to True so legitimate questions are never blocked.
    """
    keyword = matching_keyword(query)
    if keyword is not None:
        logger.debug("Weather keyword %r found in %r", keyword, query)
        return True
    if client is None or not client.configured:
        return True

    try:
        answer = await client.generate(
            CLASSIFY_PROMPT.format(query=query),
            temperature=0.1,
            max_output_tokens=5,
            top_p=1.0,
            top_k=1,
            timeout=timeout,
            max_retries=0,
            safety=False,
        )
    except AiGenerationError as e:
        logger.warning("Classification call failed, accepting query: %s", e)
        return True

    logger.debug("Classification for %r: %s", query, answer)
    return "NO" not in answer.upper()
