"""
Activity Source
Reads study sessions as SessionSnapshots grouped by the user's local day.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional

from flashquest_app.extensions import db
from flashquest_app.models import StudySession
from flashquest_app.utils.time_utils import local_day_bounds, to_local_date
from ..models import UserAchievement
from ..schemas import SessionSnapshot


def stored_day_bounds(day: date, user, dialect_name: Optional[str] = None):
    """Day bounds in the form the backend compares against stored timestamps."""
    dialect_name = dialect_name or db.engine.dialect.name
    return local_day_bounds(day, user, naive=dialect_name == 'sqlite')


def to_snapshot(session: StudySession) -> SessionSnapshot:
    return SessionSnapshot(
        session_id=session.session_id,
        status=session.status,
        correct_count=session.correct_count,
        duration_seconds=session.duration_seconds,
        answers=session.answers,
        started_at=session.started_at,
        session_xp=session.session_xp or 0,
    )


class ActivitySource:

    @staticmethod
    def sessions_between(user, first_day: date, last_day: date) -> Dict[date, List[SessionSnapshot]]:
        """Snapshots of every session started on ``first_day``..``last_day`` (local), by day."""
        start, _ = stored_day_bounds(first_day, user)
        _, end = stored_day_bounds(last_day, user)
        rows = StudySession.query.filter(
            StudySession.user_id == user.user_id,
            StudySession.started_at >= start,
            StudySession.started_at < end,
        ).order_by(StudySession.started_at).all()

        by_day = defaultdict(list)
        for row in rows:
            by_day[to_local_date(row.started_at, user)].append(to_snapshot(row))
        return by_day

    @staticmethod
    def sessions_on(user, day: date) -> List[SessionSnapshot]:
        return ActivitySource.sessions_between(user, day, day).get(day, [])

    @staticmethod
    def session_history(user, until: Optional[date] = None) -> Dict[date, List[SessionSnapshot]]:
        """Every session of the user up to and including ``until``, by local day."""
        query = StudySession.query.filter(StudySession.user_id == user.user_id)
        if until is not None:
            _, end = stored_day_bounds(until, user)
            query = query.filter(StudySession.started_at < end)

        by_day = defaultdict(list)
        for row in query.order_by(StudySession.started_at).all():
            if row.started_at is None:
                continue
            by_day[to_local_date(row.started_at, user)].append(to_snapshot(row))
        return by_day

    @staticmethod
    def achievement_xp_between(user, first_day: date, last_day: date) -> Dict[date, int]:
        """XP paid for achievements unlocked on each local day."""
        start, _ = stored_day_bounds(first_day, user)
        _, end = stored_day_bounds(last_day, user)
        rows = UserAchievement.query.filter(
            UserAchievement.user_id == user.user_id,
            UserAchievement.unlocked_at >= start,
            UserAchievement.unlocked_at < end,
        ).all()

        by_day = defaultdict(int)
        for row in rows:
            by_day[to_local_date(row.unlocked_at, user)] += row.xp_awarded or 0
        return by_day

    @staticmethod
    def day_range(last_day: date, days: int) -> List[date]:
        """``days`` consecutive dates ending at ``last_day``, oldest first."""
        return [last_day - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
