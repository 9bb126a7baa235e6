"""Time window helpers in the restaurant's local timezone"""

from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from seating.config import settings
from seating.exceptions import ValidationError


def restaurant_zone(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.default_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone {name!r}")


def parse_service_time(value: Optional[str]) -> time:
    """'HH:MM' -> time; falls back to the configured default service time"""
    raw = value or settings.default_service_time
    try:
        return datetime.strptime(raw, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid service time {raw!r}, expected HH:MM")


def local_day_bounds(day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """[start, end) of a local calendar day as UTC instants"""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def local_dates_touched(start: datetime, end: datetime, tz: ZoneInfo) -> List[date]:
    """Every local calendar date a half-open window intersects"""
    first = start.astimezone(tz).date()
    last = (end - timedelta(microseconds=1)).astimezone(tz).date()
    days = []
    current = first
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def ensure_aware(value: datetime, tz: ZoneInfo) -> datetime:
    """Naive datetimes are read as restaurant-local wall time"""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def derive_window(
    *,
    now: datetime,
    tz: ZoneInfo,
    day: Optional[date] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    duration_minutes: Optional[int] = None,
    service_time: Optional[time] = None,
) -> Tuple[datetime, datetime]:
    """
    Resolve the [start, end) window for a seat assignment.

    An explicit start wins. Without one, a target date equal to today (in
    ``tz``) starts now, any other date starts at ``service_time`` on that date.
    An explicit end wins over ``duration_minutes``, which defaults to the
    configured seating length.
    """
    if duration_minutes is None:
        duration_minutes = settings.default_seating_minutes
    if duration_minutes <= 0:
        raise ValidationError("Duration must be a positive number of minutes")

    if start_time is not None:
        start = ensure_aware(start_time, tz)
    else:
        today = now.astimezone(tz).date()
        target = day or today
        if target == today:
            start = now
        else:
            anchor = service_time or parse_service_time(None)
            start = datetime.combine(target, anchor, tzinfo=tz)

    if end_time is not None:
        end = ensure_aware(end_time, tz)
    else:
        end = start + timedelta(minutes=duration_minutes)

    if end <= start:
        raise ValidationError("Time window must end after it starts")

    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
