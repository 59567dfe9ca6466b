"""
Tests for activity aggregation and streak counting (pure logic, no database).
"""

import logging
from datetime import date, datetime

import pytest

from conftest import answers_map
from flashquest_app.modules.gamification.logics.activity_logic import (
    aggregate_sessions,
    calendar_intensity,
    cards_target_for_level,
    qualifies_for_streak,
    time_target_for_level,
)
from flashquest_app.modules.gamification.logics.streak_logic import calculate_streak_from_dates
from flashquest_app.modules.gamification.schemas import ActivityAggregate, SessionSnapshot

logger = logging.getLogger('tests.activity')


def snapshot(session_id=1, status='active', correct_count=None, duration_seconds=0, answers=None):
    return SessionSnapshot(
        session_id=session_id,
        status=status,
        correct_count=correct_count,
        duration_seconds=duration_seconds,
        answers=answers if answers is not None else {},
    )


class TestAggregation:

    def test_active_session_counts_answer_map(self):
        total = aggregate_sessions([snapshot(answers=answers_map(correct=32, incorrect=3), duration_seconds=125)])

        assert total.correct_answers == 32
        assert total.minutes == 2

    def test_completed_session_uses_finalized_counter(self):
        total = aggregate_sessions([snapshot(status='completed', correct_count=15, duration_seconds=600)])

        assert total.correct_answers == 15
        assert total.minutes == 10
        assert total.completed_sessions == 1

    def test_completed_session_without_counter_counts_zero(self):
        total = aggregate_sessions([snapshot(status='completed', correct_count=None,
                                             answers=answers_map(correct=4))], logger)

        assert total.correct_answers == 0

    def test_mixed_statuses_are_summed(self):
        total = aggregate_sessions([
            snapshot(1, status='completed', correct_count=10, duration_seconds=300),
            snapshot(2, status='active', answers=answers_map(correct=7), duration_seconds=120),
            snapshot(3, status='abandoned', answers=answers_map(correct=2, skipped=1), duration_seconds=60),
        ])

        assert total.correct_answers == 19
        assert total.minutes == 8
        assert total.sessions == 3

    def test_minutes_floor_per_session(self):
        total = aggregate_sessions([snapshot(1, duration_seconds=90), snapshot(2, duration_seconds=90)])

        assert total.minutes == 2

    def test_divergence_is_logged_not_averaged(self, caplog):
        with caplog.at_level(logging.WARNING, logger='tests.activity'):
            total = aggregate_sessions([
                snapshot(7, status='completed', correct_count=25, answers=answers_map(correct=20)),
            ], logger)

        assert total.correct_answers == 25
        assert 'Session 7' in caplog.text

    def test_unreadable_session_contributes_zero(self, caplog):
        with caplog.at_level(logging.WARNING, logger='tests.activity'):
            total = aggregate_sessions([
                snapshot(1, answers=['correct', 'correct']),
                snapshot(2, duration_seconds='soon'),
                snapshot(3, answers=answers_map(correct=3), duration_seconds=60),
            ], logger)

        assert total.correct_answers == 3
        assert total.minutes == 1
        assert total.sessions == 1
        assert 'Skipping unreadable session 1' in caplog.text


class TestThresholds:

    @pytest.mark.parametrize('minutes, correct, expected', [
        (10, 0, True),
        (0, 20, True),
        (9, 19, False),
    ])
    def test_streak_qualification(self, minutes, correct, expected):
        aggregate = ActivityAggregate(correct_answers=correct, minutes=minutes, sessions=1)

        assert qualifies_for_streak(aggregate) is expected

    @pytest.mark.parametrize('level, cards, minutes', [
        (1, 30, 20),
        (2, 35, 20),
        (3, 35, 25),
        (9, 50, 35),
        (30, 50, 45),
    ])
    def test_targets_scale_with_level(self, level, cards, minutes):
        assert cards_target_for_level(level) == cards
        assert time_target_for_level(level) == minutes

    def test_calendar_intensity(self):
        assert calendar_intensity(ActivityAggregate(correct_answers=10, minutes=15, sessions=1)) == 3
        assert calendar_intensity(ActivityAggregate(correct_answers=10, minutes=0, sessions=1)) == 2
        assert calendar_intensity(ActivityAggregate(correct_answers=5, minutes=0, sessions=1)) == 1
        assert calendar_intensity(ActivityAggregate()) == 0


class TestStreakLogic:

    def test_consecutive_days(self):
        dates = [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]

        assert calculate_streak_from_dates(dates, today=date(2024, 1, 3)) == 3

    def test_gap_breaks_streak(self):
        dates = [date(2024, 1, 3), date(2024, 1, 1)]

        assert calculate_streak_from_dates(dates, today=date(2024, 1, 3)) == 1

    def test_yesterday_keeps_streak_alive(self):
        dates = ['2024-01-02', datetime(2024, 1, 1, 22, 0)]

        assert calculate_streak_from_dates(dates, today=date(2024, 1, 3)) == 2

    def test_stale_activity_is_no_streak(self):
        assert calculate_streak_from_dates([date(2024, 1, 1)], today=date(2024, 1, 3)) == 0
        assert calculate_streak_from_dates([], today=date(2024, 1, 3)) == 0
        assert calculate_streak_from_dates(['not a date'], today=date(2024, 1, 3)) == 0
