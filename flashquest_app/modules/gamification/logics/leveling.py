"""
Leveling Logic - Pure functions for XP and level-up cascades.

NO database, NO Flask, NO model dependencies allowed.
"""
import math

from ..constants import BASE_LEVEL_XP, LEVEL_GROWTH_FACTOR
from ..schemas import ProgressionState


def next_threshold(threshold: int) -> int:
    """XP needed for the level after one that needed ``threshold``."""
    return math.floor(threshold * LEVEL_GROWTH_FACTOR)


def apply_xp_delta(state: ProgressionState, delta: int) -> ProgressionState:
    """
    Credit (or correct) XP and normalize level-up cascades.

    Positive deltas add to both ``current_xp`` and ``total_xp``. Negative deltas
    only lower ``current_xp`` (floored at 0); ``total_xp`` never goes down.

    Examples:
        >>> apply_xp_delta(ProgressionState(1, 90, 100, 90), 250)
        ProgressionState(level=3, current_xp=120, next_level_xp=144, total_xp=340)
    """
    level = state.level
    current_xp = state.current_xp + delta
    next_level_xp = state.next_level_xp or BASE_LEVEL_XP
    total_xp = state.total_xp

    if delta > 0:
        total_xp += delta
    elif current_xp < 0:
        current_xp = 0

    while current_xp >= next_level_xp:
        current_xp -= next_level_xp
        level += 1
        next_level_xp = next_threshold(next_level_xp)

    return ProgressionState(
        level=level,
        current_xp=current_xp,
        next_level_xp=next_level_xp,
        total_xp=total_xp,
    )


def threshold_for_level(level: int) -> int:
    """Threshold for leaving ``level`` when starting from the base at level 1."""
    threshold = BASE_LEVEL_XP
    for _ in range(1, max(1, level)):
        threshold = next_threshold(threshold)
    return threshold


def progress_percentage(current_xp: int, next_level_xp: int) -> int:
    if next_level_xp <= 0:
        return 0
    return min(100, int(current_xp / next_level_xp * 100))
