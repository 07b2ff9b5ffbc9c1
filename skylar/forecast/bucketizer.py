"""Group 3-hour interval samples into local calendar days."""

from collections.abc import Iterable

from skylar.models.common import TimezoneSpec, local_datetime, local_date_key
from skylar.models.weather import DayBucket, IntervalSample

NOON_HOUR = 12


def bucketize(
    samples: Iterable[IntervalSample], tz: TimezoneSpec = None
) -> list[DayBucket]:
    """Produce one bucket per distinct local date, ascending by date.

    Samples inside each bucket are ordered by timestamp. Empty input yields
    an empty list.
    """
    by_date: dict[str, list[IntervalSample]] = {}
    for sample in samples:
        by_date.setdefault(local_date_key(sample.timestamp, tz), []).append(sample)

    return [
        DayBucket(date=key, samples=sorted(by_date[key], key=lambda s: s.timestamp))
        for key in sorted(by_date)
    ]


def select_representative(
    bucket: DayBucket, tz: TimezoneSpec = None
) -> IntervalSample:
    """Pick the sample whose local hour is closest to noon.

    Ties go to the earliest timestamp.
    """
    if not bucket.samples:
        raise ValueError(f"Bucket {bucket.date} has no samples")

    best = bucket.samples[0]
    best_distance = _noon_distance(best, tz)
    for sample in bucket.samples[1:]:
        distance = _noon_distance(sample, tz)
        if distance < best_distance or (
            distance == best_distance and sample.timestamp < best.timestamp
        ):
            best, best_distance = sample, distance
    return best


def temperature_range(bucket: DayBucket) -> tuple[float, float]:
    """True (min, max) over every sample in the bucket."""
    if not bucket.samples:
        raise ValueError(f"Bucket {bucket.date} has no samples")
    return (
        min(s.temp_min for s in bucket.samples),
        max(s.temp_max for s in bucket.samples),
    )


def _noon_distance(sample: IntervalSample, tz: TimezoneSpec) -> int:
    return abs(local_datetime(sample.timestamp, tz).hour - NOON_HOUR)
