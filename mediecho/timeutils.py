"""Timezone helpers. Timestamps are stored as naive UTC; windows are computed in the app timezone."""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


def get_app_tz(name: str) -> ZoneInfo:
    """Get the application timezone."""
    return ZoneInfo(name)


def utc_now() -> datetime:
    """Return naive UTC now, matching how columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(dt: datetime, tz_name: str) -> datetime:
    """Convert a datetime to the app's local timezone for display.

    Naive datetimes are assumed to be UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(get_app_tz(tz_name))


def to_utc_naive(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def local_start_of_day(day: date, tz_name: str) -> datetime:
    """Midnight of ``day`` in the app timezone, as naive UTC."""
    return to_utc_naive(datetime.combine(day, time.min, tzinfo=get_app_tz(tz_name)))


def local_end_of_day(day: date, tz_name: str) -> datetime:
    """Last microsecond of ``day`` in the app timezone, as naive UTC."""
    return to_utc_naive(datetime.combine(day, time.max, tzinfo=get_app_tz(tz_name)))


def week_bounds(
    tz_name: str, now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Monday 00:00:00 to Sunday 23:59:59.999999 of the week containing ``now``.

    ``now`` is naive UTC (defaults to the current time). Returns naive UTC.
    """
    local_now = to_local(now or utc_now(), tz_name)
    monday = local_now.date() - timedelta(days=local_now.weekday())
    sunday = monday + timedelta(days=6)
    return local_start_of_day(monday, tz_name), local_end_of_day(sunday, tz_name)


def previous_week_bounds(
    tz_name: str, now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Bounds of the full calendar week before the one containing ``now``."""
    local_now = to_local(now or utc_now(), tz_name)
    return week_bounds(tz_name, to_utc_naive(local_now - timedelta(days=7)))


def short_date(dt: datetime, tz_name: str) -> str:
    """Format as M/D/YYYY in the app timezone."""
    local_dt = to_local(dt, tz_name)
    return f"{local_dt.month}/{local_dt.day}/{local_dt.year}"


def short_datetime(dt: datetime, tz_name: str) -> str:
    """Format as M/D/YYYY, H:MM:SS AM in the app timezone."""
    local_dt = to_local(dt, tz_name)
    hour = local_dt.hour % 12 or 12
    suffix = "AM" if local_dt.hour < 12 else "PM"
    return (
        f"{short_date(dt, tz_name)}, "
        f"{hour}:{local_dt.minute:02d}:{local_dt.second:02d} {suffix}"
    )
