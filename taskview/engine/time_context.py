"""TimeContext construction for taskview.

Derives the five anchor instants from a single `now`. When no instant is
supplied the wall clock is read in UTC with weeks starting on Sunday; callers
that need another calendar pass `time_zone` or build a TimeContext themselves.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskview.models.constants import DEFAULT_WEEK_START_DAY
from taskview.models.state import TimeContext
from taskview.models.task import assume_utc


class TimeZoneError(ValueError):
    """Raised when a time zone name cannot be resolved."""

    def __init__(self, name: str):
        super().__init__(f"Unknown time zone: {name}")
        self.name = name


def resolve_time_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimeZoneError(name) from e


def sunday_based_weekday(dt: datetime) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    # Python weekday: Monday=0 ... Sunday=6
    return (dt.weekday() + 1) % 7


def build_time_context(
    now: Optional[datetime] = None,
    *,
    time_zone: Optional[str] = None,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> TimeContext:
    """Build a TimeContext for `now`.

    Args:
        now: The instant to anchor on (defaults to the current UTC time).
            Naive values are treated as UTC.
        time_zone: Optional IANA zone name; `now` is converted into it before
            local midnight is taken.
        week_start_day: First day of the week, Sunday=0.

    Returns:
        TimeContext whose midnights follow the calendar of `now`'s zone.

    Raises:
        TimeZoneError: If `time_zone` is not a known zone.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now = assume_utc(now)
    if time_zone:
        now = now.astimezone(resolve_time_zone(time_zone))

    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    days_into_week = (sunday_based_weekday(today_start) - week_start_day) % 7
    week_start = today_start - timedelta(days=days_into_week)

    return TimeContext(
        now=now,
        today_start=today_start,
        tomorrow_start=today_start + timedelta(days=1),
        week_start=week_start,
        next_week_start=week_start + timedelta(days=7),
    )
