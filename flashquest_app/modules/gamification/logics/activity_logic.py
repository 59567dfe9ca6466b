"""
Activity Logic - Pure aggregation of study sessions into daily totals.

NO database, NO Flask, NO model dependencies allowed.

Both the daily-challenge display and the reward claim go through
``aggregate_sessions``; there is no second formula.
"""
import logging
from typing import Iterable, Optional

from ..constants import (
    CARDS_TARGET_BASE,
    CARDS_TARGET_MAX,
    CARDS_TARGET_STEP,
    STREAK_MIN_CORRECT,
    STREAK_MIN_MINUTES,
    TIME_TARGET_BASE,
    TIME_TARGET_MAX,
    TIME_TARGET_STEP,
)
from ..schemas import ActivityAggregate, SessionSnapshot

STATUS_COMPLETED = 'completed'
ANSWER_CORRECT = 'correct'

_default_logger = logging.getLogger(__name__)


def count_correct_answers(answers) -> int:
    if not answers:
        return 0
    return sum(1 for value in answers.values() if value == ANSWER_CORRECT)


def session_correct_count(snapshot: SessionSnapshot, logger: Optional[logging.Logger] = None) -> int:
    """
    Correct answers for one session.

    Completed sessions use the finalized counter; every other status counts
    'correct' entries in the live answers map.
    """
    logger = logger or _default_logger
    if snapshot.status != STATUS_COMPLETED:
        return count_correct_answers(snapshot.answers)

    finalized = snapshot.correct_count or 0
    if snapshot.answers:
        live = count_correct_answers(snapshot.answers)
        if live != finalized:
            logger.warning(
                f"[Gamification] Session {snapshot.session_id} correct_count={finalized} "
                f"but answers map has {live} correct entries"
            )
    return finalized


def session_minutes(snapshot: SessionSnapshot) -> int:
    return max(0, int(snapshot.duration_seconds or 0)) // 60


def aggregate_sessions(
    snapshots: Iterable[SessionSnapshot],
    logger: Optional[logging.Logger] = None
) -> ActivityAggregate:
    """
    Sum correct answers, whole minutes and session XP over all sessions, whatever their status.

    A session that cannot be read is logged and contributes nothing.
    """
    logger = logger or _default_logger
    total = ActivityAggregate()
    for snapshot in snapshots:
        try:
            correct = session_correct_count(snapshot, logger)
            minutes = session_minutes(snapshot)
            xp = max(0, int(snapshot.session_xp or 0))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(
                f"[Gamification] Skipping unreadable session {getattr(snapshot, 'session_id', '?')}: {e}"
            )
            continue
        total.correct_answers += correct
        total.minutes += minutes
        total.session_xp += xp
        total.sessions += 1
        if snapshot.status == STATUS_COMPLETED:
            total.completed_sessions += 1
    return total


def qualifies_for_streak(aggregate: ActivityAggregate) -> bool:
    return aggregate.minutes >= STREAK_MIN_MINUTES or aggregate.correct_answers >= STREAK_MIN_CORRECT


def cards_target_for_level(level: int) -> int:
    return min(CARDS_TARGET_BASE + (max(level, 1) // 2) * CARDS_TARGET_STEP, CARDS_TARGET_MAX)


def time_target_for_level(level: int) -> int:
    return min(TIME_TARGET_BASE + (max(level, 1) // 3) * TIME_TARGET_STEP, TIME_TARGET_MAX)


def calendar_intensity(aggregate: ActivityAggregate) -> int:
    """0-3 heat level: 10 correct answers and 15 minutes each max out their half."""
    if aggregate.sessions == 0 or (aggregate.correct_answers == 0 and aggregate.minutes == 0):
        return 0
    cards_score = min(aggregate.correct_answers / 10, 1)
    time_score = min(aggregate.minutes / 15, 1)
    combined = (cards_score + time_score) / 2
    if combined > 0.66:
        return 3
    if combined > 0.33:
        return 2
    if combined > 0:
        return 1
    return 0
