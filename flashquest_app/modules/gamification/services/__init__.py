from .achievement_service import AchievementService
from .catalog_service import CatalogService
from .daily_challenge_service import DailyChallengeService
from .progression_service import ProgressionService
from .streak_service import StreakService
from .user_guard import user_transaction

__all__ = [
    'AchievementService',
    'CatalogService',
    'DailyChallengeService',
    'ProgressionService',
    'StreakService',
    'user_transaction',
]
