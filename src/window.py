import datetime
from typing import NamedTuple

GRANULARITIES = {
    "m": "minute",
    "minute": "minute",
    "h": "hour",
    "hour": "hour",
    "d": "day",
    "day": "day",
}

UNIT_DELTAS = {
    "minute": datetime.timedelta(minutes=1),
    "hour": datetime.timedelta(hours=1),
    "day": datetime.timedelta(days=1),
}


class Window(NamedTuple):
    """Half-open time window [start, end) in UTC."""

    start: datetime.datetime
    end: datetime.datetime

    def contains(self, moment: datetime.datetime) -> bool:
        return self.start <= moment < self.end


def normalize_granularity(granularity: str) -> str:
    """Return the canonical unit name for a granularity or alias."""
    unit = GRANULARITIES.get(granularity)
    if unit is None:
        raise ValueError(
            f"Unknown granularity {granularity!r}, expected one of {sorted(GRANULARITIES)}"
        )
    return unit


def unit_value(moment: datetime.datetime, unit: str) -> int:
    """Position of moment within the enclosing unit cycle."""
    if unit == "minute":
        return moment.minute
    if unit == "hour":
        return moment.hour
    # Day of week, Sunday = 0
    return moment.isoweekday() % 7


def floor_to_unit(moment: datetime.datetime, unit: str) -> datetime.datetime:
    """Truncate moment to the start of its unit."""
    moment = moment.replace(second=0, microsecond=0)
    if unit in ("hour", "day"):
        moment = moment.replace(minute=0)
    if unit == "day":
        moment = moment.replace(hour=0)
    return moment


def as_utc(moment: datetime.datetime) -> datetime.datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(datetime.timezone.utc)


def plan_window(
    period: int,
    granularity: str,
    offset: int = 1,
    now: datetime.datetime | None = None,
) -> Window:
    """Compute the window `offset` periods before the current period.

    The current period starts at the last multiple of `period` units within
    the unit cycle (e.g. hour of day for hourly windows). With period=4,
    granularity="h" and offset=1 at 13:27 UTC the window is [08:00, 12:00).
    """
    if period < 1:
        raise ValueError(f"Period must be a positive integer, got {period}")
    if offset < 0:
        raise ValueError(f"Offset must be non-negative, got {offset}")

    unit = normalize_granularity(granularity)
    delta = UNIT_DELTAS[unit]
    now = as_utc(now or datetime.datetime.now(datetime.timezone.utc))

    rollback = unit_value(now, unit) % period
    start = floor_to_unit(now - rollback * delta - offset * period * delta, unit)

    return Window(start, start + period * delta)


def plan_rolling_day(
    period: int, granularity: str, now: datetime.datetime | None = None
) -> Window:
    """Return the 24 hours ending at the start of the current period."""
    unit = normalize_granularity(granularity)
    delta = UNIT_DELTAS[unit]
    now = as_utc(now or datetime.datetime.now(datetime.timezone.utc))

    rollback = unit_value(now, unit) % period
    day = datetime.timedelta(hours=24)
    start = floor_to_unit(now - rollback * delta - day, unit)

    return Window(start, start + day)
