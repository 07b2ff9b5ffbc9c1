"""Detect and repair implausible icon/condition pairs within a day."""

import logging
from collections.abc import Sequence

from skylar.models.weather import IntervalSample, WeatherCondition

logger = logging.getLogger(__name__)

PRECIPITATION_PREFIXES = frozenset({"09", "10", "11"})
CONSISTENT_PREFIXES: dict[str, frozenset[str]] = {
    "Clear": frozenset({"01"}),
    "Clouds": frozenset({"02", "03", "04"}),
}

# Icon groups the weather source documents for each condition category.
CONDITION_ICON_PREFIXES: dict[str, frozenset[str]] = {
    "Clear": frozenset({"01"}),
    "Clouds": frozenset({"02", "03", "04"}),
    "Rain": frozenset({"09", "10"}),
    "Drizzle": frozenset({"09"}),
    "Thunderstorm": frozenset({"11"}),
    "Snow": frozenset({"13"}),
    "Mist": frozenset({"50"}),
    "Smoke": frozenset({"50"}),
    "Haze": frozenset({"50"}),
    "Dust": frozenset({"50"}),
    "Fog": frozenset({"50"}),
    "Sand": frozenset({"50"}),
    "Ash": frozenset({"50"}),
    "Squall": frozenset({"50"}),
    "Tornado": frozenset({"50"}),
}


def is_mismatched(condition: WeatherCondition) -> bool:
    """Clear or Clouds paired with a rain, shower or storm icon."""
    return (
        condition.category in CONSISTENT_PREFIXES
        and condition.icon_prefix in PRECIPITATION_PREFIXES
    )


def is_consistent(condition: WeatherCondition) -> bool:
    allowed = CONSISTENT_PREFIXES.get(condition.category)
    return allowed is not None and condition.icon_prefix in allowed


def is_icon_valid(condition: WeatherCondition) -> bool:
    """Whether the icon belongs to the documented group for the category."""
    allowed = CONDITION_ICON_PREFIXES.get(condition.category, frozenset())
    return condition.icon_prefix in allowed and condition.icon_code[2:] in ("d", "n")


def reconcile(
    representative: IntervalSample, siblings: Sequence[IntervalSample]
) -> IntervalSample:
    """Return the sample whose condition should be displayed for the day.

    A mismatched representative is replaced by the first consistent sibling
    in chronological order. Otherwise the representative is kept. Applying
    this to its own result returns the same sample.
    """
    if not is_mismatched(representative.condition):
        return representative

    for sibling in sorted(siblings, key=lambda s: s.timestamp):
        if sibling is representative:
            continue
        if is_consistent(sibling.condition):
            logger.info(
                "Replacing %s/%s at %d with %s/%s at %d",
                representative.condition.category,
                representative.condition.icon_code,
                representative.timestamp,
                sibling.condition.category,
                sibling.condition.icon_code,
                sibling.timestamp,
            )
            return sibling

    logger.debug(
        "No consistent sibling for %s/%s at %d, keeping original",
        representative.condition.category,
        representative.condition.icon_code,
        representative.timestamp,
    )
    return representative


def warn_if_invalid(condition: WeatherCondition, context: str = "") -> bool:
    """Log a warning when the icon does not fit the category. Returns validity."""
    valid = is_icon_valid(condition)
    if not valid:
        logger.warning(
            "Icon %s may not fit condition %s (%s)%s",
            condition.icon_code,
            condition.category,
            condition.description,
            f" for {context}" if context else "",
        )
    return valid
