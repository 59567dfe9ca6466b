"""
Time helpers for FlashQuest.
Goal: store UTC everywhere, decide "today" in the user's own timezone.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

import pytz
from flask import current_app, has_app_context


def utcnow() -> datetime:
    """
    Current timezone-aware UTC datetime.
    Always use this instead of datetime.utcnow() or datetime.now().
    """
    return datetime.now(timezone.utc)


def user_timezone(user=None):
    """
    Resolve the pytz timezone for ``user``.

    Falls back to SYSTEM_TIMEZONE, then UTC, when the user has no zone or an
    unknown one.
    """
    tz_name = None
    if user is not None:
        tz_name = getattr(user, 'timezone', None)
    if not tz_name and has_app_context():
        tz_name = current_app.config.get('SYSTEM_TIMEZONE')
    try:
        return pytz.timezone(tz_name or 'UTC')
    except pytz.UnknownTimeZoneError:
        if has_app_context():
            current_app.logger.warning(f"Unknown timezone {tz_name!r}, using UTC")
        return pytz.UTC


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_user_timezone(dt: Optional[datetime], user=None) -> Optional[datetime]:
    if dt is None:
        return None
    return as_utc(dt).astimezone(user_timezone(user))


def to_local_date(dt: Optional[datetime], user=None) -> Optional[date]:
    local = to_user_timezone(dt, user)
    return local.date() if local else None


def user_today(user=None, now: Optional[datetime] = None) -> date:
    """Calendar date the user is currently living in."""
    return to_local_date(now or utcnow(), user)


def user_local_hour(user=None, at: Optional[datetime] = None) -> int:
    return to_user_timezone(at or utcnow(), user).hour


def local_day_bounds(day: date, user=None, naive: bool = True) -> Tuple[datetime, datetime]:
    """
    UTC ``[start, end)`` of the user's local calendar ``day``.

    ``naive`` strips tzinfo for SQLite, which stores and returns datetimes
    without an offset. Backends with real timestamptz columns need aware bounds.
    """
    tz = user_timezone(user)
    start = tz.localize(datetime.combine(day, time.min)).astimezone(timezone.utc)
    end = tz.localize(datetime.combine(day + timedelta(days=1), time.min)).astimezone(timezone.utc)
    if naive:
        return start.replace(tzinfo=None), end.replace(tzinfo=None)
    return start, end
