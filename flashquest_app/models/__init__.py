"""Database models package for FlashQuest."""

from ..db_instance import db

from .user import User
from .deck import Card, CardProgress, Deck
from .study_session import StudySession
from ..modules.gamification.models import Achievement, DailyChallenge, UserAchievement

__all__ = [
    'db',
    'User',
    'Deck',
    'Card',
    'CardProgress',
    'StudySession',
    'Achievement',
    'UserAchievement',
    'DailyChallenge',
]
