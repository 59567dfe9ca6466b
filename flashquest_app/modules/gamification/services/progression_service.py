"""
Progression Service
===================
The XP ledger: the only writer of level, current_xp, next_level_xp and total_xp.
"""

from flask import current_app

from flashquest_app.extensions import db
from flashquest_app.models import User
from flashquest_app.core.error_handlers import NotFoundError
from flashquest_app.core.signals import level_up, xp_awarded
from ..logics.leveling import apply_xp_delta, progress_percentage
from ..schemas import ProgressionResult, ProgressionState
from .user_guard import defer_signal, user_transaction


class ProgressionService:

    @staticmethod
    def state_of(user) -> ProgressionState:
        return ProgressionState(
            level=user.level or 1,
            current_xp=user.current_xp or 0,
            next_level_xp=user.next_level_xp,
            total_xp=user.total_xp or 0,
        )

    @staticmethod
    def apply_xp_delta(user_id: int, delta: int, reason: str = '') -> ProgressionResult:
        """
        Credit ``delta`` XP (negative for corrections) and normalize level-ups.

        Joins the caller's ``user_transaction`` when there is one, so an unlock
        and its XP reward commit together.
        """
        with user_transaction(user_id) as user:
            before = ProgressionService.state_of(user)
            after = apply_xp_delta(before, delta)

            user.level = after.level
            user.current_xp = after.current_xp
            user.next_level_xp = after.next_level_xp
            user.total_xp = after.total_xp

            result = ProgressionResult(
                user_id=user_id,
                level=after.level,
                current_xp=after.current_xp,
                next_level_xp=after.next_level_xp,
                total_xp=after.total_xp,
                old_level=before.level,
                delta=delta,
            )

            if delta:
                current_app.logger.info(
                    f"[Gamification] XP {delta:+d} for user {user_id} ({reason or 'unspecified'}): "
                    f"level {before.level}->{after.level}, total {after.total_xp}"
                )
                defer_signal(
                    xp_awarded,
                    user_id=user_id,
                    amount=delta,
                    reason=reason,
                    old_level=before.level,
                    new_level=after.level,
                    total_xp=after.total_xp,
                )
            if result.leveled_up:
                defer_signal(level_up, user_id=user_id, old_level=before.level, new_level=after.level)

        return result

    @staticmethod
    def get_progression(user_id: int) -> dict:
        """Read-only progression summary for display."""
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f'User {user_id} not found', resource='user')

        state = ProgressionService.state_of(user)
        return {
            'level': state.level,
            'current_xp': state.current_xp,
            'next_level_xp': state.next_level_xp,
            'total_xp': state.total_xp,
            'progress_percent': progress_percentage(state.current_xp, state.next_level_xp),
            'streak': user.streak or 0,
            'longest_streak': user.longest_streak or 0,
        }
