"""
Public API of the gamification module.

Other modules (study sessions) import from here, never from services directly.
"""
from typing import List, Optional

from .schemas import (
    AchievementDefinition,
    ClaimResult,
    DailyChallengesDTO,
    ProgressionResult,
    SessionContext,
    StreakDTO,
)
from .services.achievement_service import AchievementService
from .services.daily_challenge_service import DailyChallengeService
from .services.progression_service import ProgressionService
from .services.streak_service import StreakService
from .services.user_guard import savepoint, user_transaction


def apply_xp_delta(user_id: int, delta: int, reason: str = '') -> ProgressionResult:
    return ProgressionService.apply_xp_delta(user_id, delta, reason)


def get_progression(user_id: int) -> dict:
    return ProgressionService.get_progression(user_id)


def evaluate_achievements(user_id: int, context: Optional[SessionContext] = None) -> List[AchievementDefinition]:
    """Unlock newly met achievements; returns only the ones unlocked by this call."""
    return AchievementService.evaluate(user_id, context)


def list_achievements(user_id: int) -> dict:
    return AchievementService.list_achievements(user_id)


def get_daily_challenges(user_id: int) -> DailyChallengesDTO:
    return DailyChallengeService.get_today(user_id)


def claim_daily_reward(user_id: int, challenge_id: str) -> ClaimResult:
    return DailyChallengeService.claim_reward(user_id, challenge_id)


def get_activity_calendar(user_id: int, days: Optional[int] = None) -> list:
    if days is None:
        return DailyChallengeService.get_activity_calendar(user_id)
    return DailyChallengeService.get_activity_calendar(user_id, days)


def refresh_streak(user_id: int) -> StreakDTO:
    return StreakService.refresh_streak(user_id)


def get_streak(user_id: int) -> StreakDTO:
    return StreakService.get_streak_info(user_id)


__all__ = [
    'apply_xp_delta',
    'claim_daily_reward',
    'evaluate_achievements',
    'get_activity_calendar',
    'get_daily_challenges',
    'get_progression',
    'get_streak',
    'list_achievements',
    'refresh_streak',
    'savepoint',
    'user_transaction',
]
