"""AI-written weather summaries, cached through the freshness gate.

Two kinds are produced per location:

* ``short``: a one or two sentence outlook for the home screen.
* ``detail``: a list of practical tips (clothing, commute, health) split
  into display lines.
"""

import logging
import re
from dataclasses import dataclass, field

from skylar.ai.assistant import WeatherAssistant, build_weather_context
from skylar.errors import AiGenerationError, FetchError
from skylar.ingest.freshness import FreshnessGate
from skylar.models.weather import ForecastBundle

logger = logging.getLogger(__name__)

SHORT = "short"
DETAIL = "detail"
KINDS = (SHORT, DETAIL)

SHORT_PROMPT = (
    "As Skylar, a weather assistant, write a one or two sentence outlook for "
    "today based on this weather data:\n{context}\n\n"
    "Be friendly and concise."
)
DETAIL_PROMPT = (
    "As Skylar, a weather assistant, list 3 to 5 short practical tips for "
    "today (clothing, commute, health) based on this weather data:\n{context}\n\n"
    "Return one tip per line."
)

SHORT_FALLBACK = "Weather insights are unavailable right now. Check the forecast below for details."
DETAIL_FALLBACK = [
    "Check the hourly forecast before heading out.",
    "Dress in layers if temperatures change through the day.",
]

_LIST_MARKER = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s*")


def split_lines(text: str) -> list[str]:
    """Split a list answer into display lines without bullets or numbering."""
    lines = []
    for raw in text.splitlines():
        line = _LIST_MARKER.sub("", raw).strip()
        if line:
            lines.append(line)
    return lines


def summary_class(kind: str, location: str) -> str:
    return f"aiSummary:{kind}:{location.strip().lower()}"


@dataclass(frozen=True)
class Summary:
    kind: str
    location: str
    text: str
    lines: list[str] = field(default_factory=list)
    fallback: bool = False


class SummaryService:
    def __init__(self, assistant: WeatherAssistant, gate: FreshnessGate):
        self.assistant = assistant
        self.gate = gate

    async def short(self, bundle: ForecastBundle, force: bool = False) -> Summary:
        return await self.summary(SHORT, bundle, force)

    async def detail(self, bundle: ForecastBundle, force: bool = False) -> Summary:
        return await self.summary(DETAIL, bundle, force)

    async def summary(self, kind: str, bundle: ForecastBundle, force: bool = False) -> Summary:
        if kind not in KINDS:
            raise ValueError(f"Unknown summary kind: {kind}")
        location = bundle.location
        data_class = summary_class(kind, location)

        async def load() -> Summary:
            return await self._generate(kind, bundle)

        try:
            if force:
                return await self.gate.refresh(data_class, load)
            return await self.gate.get(data_class, load)
        except FetchError as e:
            if e.cached is not None:
                logger.warning("Serving cached %s summary for %s: %s", kind, location, e.cause)
                return e.cached
            logger.exception("Summary generation failed for %s", data_class)
            return fallback_summary(kind, location)

    async def _generate(self, kind: str, bundle: ForecastBundle) -> Summary:
        context = build_weather_context(bundle, self.assistant.units)
        if kind == SHORT:
            text = await self.assistant.generate(SHORT_PROMPT.format(context=context))
            return Summary(kind=kind, location=bundle.location, text=text)

        text = await self.assistant.generate(
            DETAIL_PROMPT.format(context=context), max_output_tokens=200
        )
        lines = split_lines(text)
        if not lines:
            raise AiGenerationError("Detail summary had no lines", reason="empty")
        return Summary(kind=kind, location=bundle.location, text=text, lines=lines)


def fallback_summary(kind: str, location: str) -> Summary:
    if kind == SHORT:
        return Summary(kind=kind, location=location, text=SHORT_FALLBACK, fallback=True)
    return Summary(
        kind=kind,
        location=location,
        text="\n".join(DETAIL_FALLBACK),
        lines=list(DETAIL_FALLBACK),
        fallback=True,
    )
