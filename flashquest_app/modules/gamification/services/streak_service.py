"""
Streak Service
==============
Manages user learning streaks (consecutive local days of qualifying activity).
"""

from flask import current_app

from flashquest_app.extensions import db
from flashquest_app.models import User
from flashquest_app.core.error_handlers import NotFoundError
from flashquest_app.utils.time_utils import user_today
from ..logics.activity_logic import aggregate_sessions, qualifies_for_streak
from ..logics.streak_logic import calculate_streak_from_dates
from ..schemas import StreakDTO
from .activity_source import ActivitySource
from .user_guard import user_transaction


class StreakService:
    """Service for managing user activity streaks."""

    @staticmethod
    def qualifying_dates(user, until=None) -> list:
        """Local days whose sessions meet the streak threshold, newest first."""
        history = ActivitySource.session_history(user, until)
        return sorted(
            (day for day, snapshots in history.items()
             if qualifies_for_streak(aggregate_sessions(snapshots, current_app.logger))),
            reverse=True,
        )

    @staticmethod
    def refresh_streak(user_id: int) -> StreakDTO:
        """
        Recompute the streak from session history and persist it.

        Returns:
            StreakDTO with the refreshed current and longest streak
        """
        with user_transaction(user_id) as user:
            today = user_today(user)
            dates = StreakService.qualifying_dates(user, today)
            current_streak = calculate_streak_from_dates(dates, today)

            previous = user.streak or 0
            user.streak = current_streak
            user.longest_streak = max(user.longest_streak or 0, current_streak)
            if dates:
                user.last_active_date = dates[0]

            if current_streak != previous:
                current_app.logger.info(
                    f"[Gamification] Streak for user {user_id}: {previous} -> {current_streak}"
                )

            return StreakDTO(
                user_id=user_id,
                current_streak=current_streak,
                longest_streak=user.longest_streak,
                last_activity_date=dates[0].isoformat() if dates else None,
                qualifies_today=bool(dates) and dates[0] == today,
            )

    @staticmethod
    def get_streak_info(user_id: int) -> StreakDTO:
        """Stored streak values for display; no recomputation."""
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f'User {user_id} not found', resource='user')

        today = user_today(user)
        return StreakDTO(
            user_id=user_id,
            current_streak=user.streak or 0,
            longest_streak=user.longest_streak or 0,
            last_activity_date=user.last_active_date.isoformat() if user.last_active_date else None,
            qualifies_today=user.last_active_date == today,
        )
