"""Weekly schedule arithmetic: next reflection instant and week windows.

All instants going in and out of this module are naive UTC datetimes, the
convention the database layer uses. Local-time reasoning happens in the
user's IANA timezone through ``zoneinfo``.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from voicejournal.errors import ValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class WeekWindow(NamedTuple):
    """Boundaries and identity of the week ending at a reflection instant."""

    week_start: datetime
    week_end: datetime
    reflection_date: datetime
    year: int
    week_number: int


def parse_reflection_time(value: str) -> tuple[int, int]:
    """Parse "HH:MM" (24h) into (hours, minutes)."""
    match = TIME_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise ValidationError(f"Invalid reflection time {value!r} (must be HH:MM)")
    return int(match.group(1)), int(match.group(2))


def validate_weekday(value: int) -> int:
    """Check a 0-6 weekday (0 = Sunday)."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
        raise ValidationError(f"Invalid reflection weekday {value!r} (must be 0-6)")
    return value


def resolve_timezone(name: str) -> ZoneInfo:
    """Load an IANA timezone or raise ValidationError."""
    if not isinstance(name, str) or not name:
        raise ValidationError(f"Invalid timezone {name!r}")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone {name!r}") from exc


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and return an aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _python_weekday(reflection_weekday: int) -> int:
    # 0 = Sunday here; datetime.weekday() has 0 = Monday, 6 = Sunday
    return (reflection_weekday - 1) % 7


def next_reflection_at(
    reflection_weekday: int,
    reflection_time: str,
    tz_name: str,
    now: datetime | None = None,
) -> datetime:
    """Next instant after ``now`` on the preferred local weekday and time.

    Starts at today's preferred local time and walks forward one day at a
    time until the weekday matches and the instant is still ahead of now.

    Args:
        reflection_weekday: 0-6, 0 = Sunday.
        reflection_time: "HH:MM" local.
        tz_name: IANA timezone name.
        now: Reference instant (naive UTC or aware). Defaults to now.

    Returns:
        Naive UTC datetime strictly after ``now``.
    """
    validate_weekday(reflection_weekday)
    hours, minutes = parse_reflection_time(reflection_time)
    tz = resolve_timezone(tz_name)

    now_utc = as_utc(now) if now is not None else datetime.now(timezone.utc)
    target_weekday = _python_weekday(reflection_weekday)

    candidate = now_utc.astimezone(tz).replace(hour=hours, minute=minutes, second=0, microsecond=0)
    while candidate.weekday() != target_weekday or candidate.astimezone(timezone.utc) <= now_utc:
        # Wall-clock arithmetic: keeps the local time across DST changes
        candidate = candidate + timedelta(days=1)

    return to_naive_utc(candidate)


def add_local_weeks(instant: datetime, tz_name: str, weeks: int = 1) -> datetime:
    """Shift an instant by whole weeks of the user's wall clock.

    A local week is not always 168 hours: across a DST change the result
    keeps the same local time of day, so 18:00 stays 18:00.
    """
    local = as_utc(instant).astimezone(resolve_timezone(tz_name))
    return to_naive_utc(local + timedelta(weeks=weeks))


def week_window(reflection_at: datetime, tz_name: str) -> WeekWindow:
    """The 7 local days ending on the reflection instant's local day."""
    tz = resolve_timezone(tz_name)
    local = as_utc(reflection_at).astimezone(tz)

    start_local = (local - timedelta(days=6)).replace(hour=0, minute=0, second=0, microsecond=0)
    iso_year, iso_week, _ = local.isocalendar()

    return WeekWindow(
        week_start=to_naive_utc(start_local),
        week_end=end_of_local_day(reflection_at, tz_name),
        reflection_date=to_naive_utc(local),
        year=iso_year,
        week_number=iso_week,
    )


def end_of_local_day(instant: datetime, tz_name: str) -> datetime:
    """Last microsecond of the instant's local day, as naive UTC."""
    tz = resolve_timezone(tz_name)
    local = as_utc(instant).astimezone(tz)
    return to_naive_utc(local.replace(hour=23, minute=59, second=59, microsecond=999999))


def describe_schedule(reflection_weekday: int, reflection_time: str, tz_name: str) -> str:
    return f"{WEEKDAY_NAMES[reflection_weekday]} at {reflection_time} ({tz_name})"
