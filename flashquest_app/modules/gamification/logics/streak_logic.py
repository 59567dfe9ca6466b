"""
Streak Logic - Pure functions for streak calculation.

NO database, NO Flask, NO model dependencies allowed.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Set, Union

DateLike = Union[date, datetime, str, None]


def calculate_streak_from_dates(activity_dates: Iterable[DateLike], today: date = None) -> int:
    """
    Count consecutive qualifying days ending today, or yesterday when today
    has not qualified yet.

    Examples:
        >>> dates = [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]
        >>> calculate_streak_from_dates(dates, today=date(2024, 1, 3))
        3

        >>> calculate_streak_from_dates([date(2024, 1, 3), date(2024, 1, 1)], today=date(2024, 1, 3))
        1
    """
    active_days: Set[date] = {d for d in map(_normalize_to_date, activity_dates) if d}
    if not active_days:
        return 0

    if today is None:
        today = date.today()

    if today in active_days:
        cursor = today
    elif today - timedelta(days=1) in active_days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in active_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def _normalize_to_date(val: DateLike) -> Optional[date]:
    """date, datetime or ISO string to a date; None when it cannot be read."""
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if isinstance(val, str):
        try:
            return datetime.fromisoformat(val).date()
        except ValueError:
            return None
    return None
