"""
Achievement Rules - Pure condition checks, one per ConditionType.

NO database, NO Flask, NO model dependencies allowed. Counts that need a query
(decks created, sessions completed, fully mastered decks) come from a
``counters`` object exposing ``decks_created()``, ``sessions_completed()`` and
``mastered_decks()``; services back it with lazy queries, tests with stubs.
"""
from typing import Any, Callable, Dict, Optional

from ..constants import (
    CARDS_PER_MINUTE_MIN_CORRECT,
    MORNING_WINDOW_HOURS,
    NIGHT_WINDOW_HOURS,
    NIGHT_WINDOW_START_HOUR,
    ConditionType,
)
from ..schemas import AchievementDefinition, SessionContext, UserStats


class InvalidConditionTypeError(ValueError):
    """Catalog entry carries a condition type outside ConditionType."""

    def __init__(self, condition_type: Any, achievement_id: Optional[str] = None):
        self.condition_type = condition_type
        self.achievement_id = achievement_id
        super().__init__(f"Unknown achievement condition type: {condition_type!r}")


Rule = Callable[[AchievementDefinition, UserStats, Any, Optional[SessionContext]], bool]


def _stat_at_least(attribute: str) -> Rule:
    def rule(definition, stats, counters, context):
        return getattr(stats, attribute) >= definition.condition_value
    return rule


def _decks_created(definition, stats, counters, context):
    return counters.decks_created() >= definition.condition_value


def _sessions_completed(definition, stats, counters, context):
    return counters.sessions_completed() >= definition.condition_value


def _mastered_decks(definition, stats, counters, context):
    return counters.mastered_decks() >= definition.condition_value


def _cards_per_minute(definition, stats, counters, context):
    duration_minutes = context.duration_seconds / 60
    if duration_minutes <= 0:
        return False
    # A single lucky fast card must not qualify
    min_correct = max(CARDS_PER_MINUTE_MIN_CORRECT, definition.condition_value)
    if context.correct_count < min_correct:
        return False
    return context.correct_count / duration_minutes >= definition.condition_value


def hour_in_window(hour: int, condition_value: int) -> bool:
    """
    ``condition_value`` encodes the window start as HH00.

    Windows starting at 20:00 or later wrap past midnight (five hours, so
    2300 covers 23:00-03:59); earlier starts cover a fixed four hours.
    """
    start_hour = condition_value // 100
    if start_hour >= NIGHT_WINDOW_START_HOUR:
        return hour >= start_hour or hour < (start_hour + NIGHT_WINDOW_HOURS) % 24
    return start_hour <= hour < start_hour + MORNING_WINDOW_HOURS


def _session_time_of_day(definition, stats, counters, context):
    if context.completed_at_hour is None or context.correct_count <= 0:
        return False
    return hour_in_window(context.completed_at_hour, definition.condition_value)


def _perfect_score(definition, stats, counters, context):
    return context.score == 100 and context.total_cards >= definition.condition_value


def _single_session_xp(definition, stats, counters, context):
    return context.session_xp >= definition.condition_value


_RULES: Dict[ConditionType, Rule] = {
    ConditionType.DECKS_COMPLETED: _stat_at_least('total_decks_completed'),
    ConditionType.STREAK_DAYS: _stat_at_least('streak'),
    ConditionType.CARDS_MASTERED: _stat_at_least('total_cards_learned'),
    ConditionType.LEVEL_REACHED: _stat_at_least('level'),
    ConditionType.TOTAL_XP: _stat_at_least('total_xp'),
    ConditionType.DECKS_CREATED: _decks_created,
    ConditionType.TOTAL_SESSIONS_COMPLETED: _sessions_completed,
    ConditionType.CARDS_PER_MINUTE: _cards_per_minute,
    ConditionType.SESSION_TIME_OF_DAY: _session_time_of_day,
    ConditionType.PERFECT_SCORE_MIN_CARDS: _perfect_score,
    ConditionType.SINGLE_SESSION_XP: _single_session_xp,
    ConditionType.CARDS_MASTERED_SINGLE_DECK: _mastered_decks,
}

SESSION_SCOPED = frozenset({
    ConditionType.CARDS_PER_MINUTE,
    ConditionType.SESSION_TIME_OF_DAY,
    ConditionType.PERFECT_SCORE_MIN_CARDS,
    ConditionType.SINGLE_SESSION_XP,
})

_missing = set(ConditionType) - set(_RULES)
if _missing:
    raise RuntimeError(f"No achievement rule for: {sorted(c.value for c in _missing)}")


def resolve_condition_type(definition: AchievementDefinition) -> ConditionType:
    try:
        return ConditionType(definition.condition_type)
    except ValueError:
        raise InvalidConditionTypeError(definition.condition_type, definition.id) from None


def condition_met(
    definition: AchievementDefinition,
    stats: UserStats,
    counters: Any,
    context: Optional[SessionContext] = None
) -> bool:
    """
    Check whether ``definition`` is satisfied.

    Session-scoped rules are never met without a session context.

    Raises:
        InvalidConditionTypeError: unknown ``condition_type``.
    """
    condition_type = resolve_condition_type(definition)
    if condition_type in SESSION_SCOPED and context is None:
        return False
    return _RULES[condition_type](definition, stats, counters, context)
