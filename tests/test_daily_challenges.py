"""
Tests for daily challenges.

Tests cover:
- Lazy creation with level-scaled, frozen targets
- Display and claim agreeing on in-progress sessions
- Claim rejections
- Activity calendar
"""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from conftest import answers_map
from flashquest_app import db
from flashquest_app.core.error_handlers import AlreadyClaimedError, NotCompletedError, ValidationError
from flashquest_app.models import DailyChallenge, StudySession, User
from flashquest_app.modules.gamification.services.achievement_service import AchievementService
from flashquest_app.modules.gamification.services.activity_source import stored_day_bounds
from flashquest_app.modules.gamification.services.daily_challenge_service import DailyChallengeService


def reload(user_id):
    db.session.expire_all()
    return db.session.get(User, user_id)


class TestTodayState:

    def test_created_lazily_once(self, user_factory):
        user = user_factory()

        first = DailyChallengeService.get_today(user.user_id)
        DailyChallengeService.get_today(user.user_id)

        assert DailyChallenge.query.filter_by(user_id=user.user_id).count() == 1
        assert first.get('cards').target == 30
        assert first.get('time').target == 20
        assert first.get('streak').target == 1

    def test_targets_frozen_for_the_day(self, user_factory):
        user = user_factory()
        DailyChallengeService.get_today(user.user_id)

        stored = reload(user.user_id)
        stored.level = 9
        db.session.commit()

        today = DailyChallengeService.get_today(user.user_id)
        assert today.get('cards').target == 30

    def test_targets_scale_with_level(self, user_factory):
        user = user_factory(level=6)

        today = DailyChallengeService.get_today(user.user_id)

        assert today.get('cards').target == 45
        assert today.get('time').target == 30

    def test_sessions_from_other_days_ignored(self, user_factory, add_session):
        user = user_factory()
        add_session(user, answers=answers_map(correct=40),
                    started_at=datetime.now(timezone.utc) - timedelta(days=1, hours=1))

        today = DailyChallengeService.get_today(user.user_id)

        assert today.correct_answers == 0


class TestDisplayClaimConsistency:

    def test_active_session_progress_is_claimable(self, user_factory, add_session):
        """32 correct answers in an unfinished session complete the 30-card challenge."""
        user = user_factory()
        add_session(user, answers=answers_map(correct=32, incorrect=4), duration_seconds=300)

        today = DailyChallengeService.get_today(user.user_id)
        cards = today.get('cards')
        assert cards.progress == 32
        assert cards.completed

        result = DailyChallengeService.claim_reward(user.user_id, 'cards')
        assert result.xp_earned == 50
        assert reload(user.user_id).total_xp == 50

    def test_completed_and_active_sessions_combine(self, user_factory, add_session):
        user = user_factory()
        add_session(user, status=StudySession.STATUS_COMPLETED, correct_count=18, duration_seconds=240)
        add_session(user, answers=answers_map(correct=12))

        assert DailyChallengeService.get_today(user.user_id).get('cards').completed
        assert DailyChallengeService.claim_reward(user.user_id, 'cards').xp_earned == 50

    def test_time_minutes_floor_per_session(self, user_factory, add_session):
        user = user_factory()
        add_session(user, duration_seconds=599)
        add_session(user, duration_seconds=599)

        assert DailyChallengeService.get_today(user.user_id).get('time').progress == 18
        with pytest.raises(NotCompletedError):
            DailyChallengeService.claim_reward(user.user_id, 'time')

        add_session(user, duration_seconds=130)
        assert DailyChallengeService.get_today(user.user_id).get('time').completed
        assert DailyChallengeService.claim_reward(user.user_id, 'time').xp_earned == 30

    def test_streak_challenge_from_live_session(self, user_factory, add_session):
        """Qualifies before the persisted streak has been updated."""
        user = user_factory()
        add_session(user, answers=answers_map(correct=20))

        assert reload(user.user_id).streak == 0
        assert DailyChallengeService.get_today(user.user_id).get('streak').completed

        result = DailyChallengeService.claim_reward(user.user_id, 'streak')
        assert result.xp_earned == 100
        assert result.leveled_up
        assert (result.old_level, result.new_level) == (1, 2)


class TestClaimRejections:

    def test_not_completed_leaves_xp(self, user_factory, add_session):
        user = user_factory()
        add_session(user, answers=answers_map(correct=10))

        with pytest.raises(NotCompletedError) as excinfo:
            DailyChallengeService.claim_reward(user.user_id, 'cards')

        assert excinfo.value.details == {'challenge_id': 'cards', 'progress': 10, 'target': 30}
        assert reload(user.user_id).total_xp == 0

    def test_second_claim_rejected(self, user_factory, add_session):
        user = user_factory()
        add_session(user, answers=answers_map(correct=35))

        DailyChallengeService.claim_reward(user.user_id, 'cards')
        with pytest.raises(AlreadyClaimedError):
            DailyChallengeService.claim_reward(user.user_id, 'cards')

        assert reload(user.user_id).total_xp == 50
        assert DailyChallengeService.get_today(user.user_id).get('cards').reward_claimed

    def test_claim_before_first_view(self, user_factory, add_session):
        user = user_factory()
        add_session(user, answers=answers_map(correct=30))

        assert DailyChallengeService.claim_reward(user.user_id, 'cards').xp_earned == 50
        assert DailyChallenge.query.filter_by(user_id=user.user_id).count() == 1

    def test_unknown_challenge(self, user_factory):
        user = user_factory()

        with pytest.raises(ValidationError):
            DailyChallengeService.claim_reward(user.user_id, 'marathon')


class TestActivityCalendar:

    def test_window_and_today(self, user_factory, add_session):
        user = user_factory()
        add_session(user, status=StudySession.STATUS_COMPLETED, correct_count=12, duration_seconds=960)

        calendar = DailyChallengeService.get_activity_calendar(user.user_id)

        assert len(calendar) == 28
        assert [entry['date'] for entry in calendar] == sorted(entry['date'] for entry in calendar)
        today = calendar[-1]
        assert today['studied'] is True
        assert today['intensity'] == 3
        assert today['cards'] == 12
        assert today['minutes'] == 16
        assert not any(entry['studied'] for entry in calendar[:-1])

    def test_custom_window(self, user_factory):
        user = user_factory()

        assert len(DailyChallengeService.get_activity_calendar(user.user_id, 7)) == 7

    def test_xp_earned_per_day(self, user_factory, add_session):
        """Session XP, achievement rewards and challenge rewards all count toward the day."""
        user = user_factory(total_decks_completed=1)
        add_session(user, answers=answers_map(correct=30), session_xp=40)
        AchievementService.evaluate(user.user_id)
        DailyChallengeService.claim_reward(user.user_id, 'cards')

        calendar = DailyChallengeService.get_activity_calendar(user.user_id, 3)

        assert [entry['xp_earned'] for entry in calendar] == [0, 0, 40 + 50 + 50]


class TestDayBounds:

    def test_sqlite_bounds_are_naive_utc(self):
        user = SimpleNamespace(timezone='Asia/Ho_Chi_Minh')

        start, end = stored_day_bounds(date(2026, 3, 10), user, 'sqlite')

        assert start == datetime(2026, 3, 9, 17, 0)
        assert end == datetime(2026, 3, 10, 17, 0)

    def test_other_backends_get_aware_bounds(self):
        user = SimpleNamespace(timezone='Asia/Ho_Chi_Minh')

        start, end = stored_day_bounds(date(2026, 3, 10), user, 'postgresql')

        assert start == datetime(2026, 3, 9, 17, 0, tzinfo=timezone.utc)
        assert end - start == timedelta(days=1)
