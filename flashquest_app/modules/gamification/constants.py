"""Fixed progression constants shared by the gamification logics and services."""

from __future__ import annotations

from enum import Enum

# --- Leveling ---
BASE_LEVEL_XP = 100
LEVEL_GROWTH_FACTOR = 1.2


class ConditionType(str, Enum):
    """Closed set of achievement unlock rules."""

    DECKS_COMPLETED = 'decks_completed'
    STREAK_DAYS = 'streak_days'
    CARDS_MASTERED = 'cards_mastered'
    LEVEL_REACHED = 'level_reached'
    TOTAL_XP = 'total_xp'
    DECKS_CREATED = 'decks_created'
    TOTAL_SESSIONS_COMPLETED = 'total_sessions_completed'
    CARDS_PER_MINUTE = 'cards_per_minute'
    SESSION_TIME_OF_DAY = 'session_time_of_day'
    PERFECT_SCORE_MIN_CARDS = 'perfect_score_min_cards'
    SINGLE_SESSION_XP = 'single_session_xp'
    CARDS_MASTERED_SINGLE_DECK = 'cards_mastered_single_deck'


# Minimum correct answers before a cards-per-minute rate counts
CARDS_PER_MINUTE_MIN_CORRECT = 10

# Night windows start at or after this hour and wrap past midnight
NIGHT_WINDOW_START_HOUR = 20
NIGHT_WINDOW_HOURS = 5
MORNING_WINDOW_HOURS = 4


# --- Daily challenges ---
CHALLENGE_CARDS = 'cards'
CHALLENGE_TIME = 'time'
CHALLENGE_STREAK = 'streak'
CHALLENGE_IDS = (CHALLENGE_CARDS, CHALLENGE_TIME, CHALLENGE_STREAK)

CHALLENGE_REWARDS: dict[str, int] = {
    CHALLENGE_CARDS: 50,
    CHALLENGE_TIME: 30,
    CHALLENGE_STREAK: 100,
}

CHALLENGE_CONFIG: dict[str, dict[str, str]] = {
    CHALLENGE_CARDS: {
        'title_key': 'challenges.cards.title',
        'icon': 'BookOpen',
        'color': 'from-blue-500 to-blue-600',
    },
    CHALLENGE_TIME: {
        'title_key': 'challenges.time.title',
        'icon': 'Clock',
        'color': 'from-purple-500 to-purple-600',
    },
    CHALLENGE_STREAK: {
        'title_key': 'challenges.streak.title',
        'icon': 'Flame',
        'color': 'from-orange-500 to-red-600',
    },
}

CARDS_TARGET_BASE = 30
CARDS_TARGET_STEP = 5
CARDS_TARGET_MAX = 50
TIME_TARGET_BASE = 20  # minutes
TIME_TARGET_STEP = 5
TIME_TARGET_MAX = 45


# --- Streak ---
STREAK_MIN_MINUTES = 10
STREAK_MIN_CORRECT = 20

ACTIVITY_CALENDAR_DAYS = 28
