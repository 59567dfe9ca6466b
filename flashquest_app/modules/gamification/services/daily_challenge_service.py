"""
Daily Challenge Service
=======================
Per-user, per-day challenges (cards, time, streak) and their reward claims.

Progress shown by ``get_today`` and eligibility checked by ``claim_reward``
come from the same ``_progress`` call over a fresh read of today's sessions,
so a challenge displayed as complete is always claimable.
"""

from datetime import date
from typing import Optional

from flask import current_app

from flashquest_app.extensions import db
from flashquest_app.core.error_handlers import (
    AlreadyClaimedError,
    NotCompletedError,
    NotFoundError,
    ValidationError,
)
from flashquest_app.models import User
from flashquest_app.utils.time_utils import user_today
from ..constants import (
    ACTIVITY_CALENDAR_DAYS,
    CHALLENGE_CARDS,
    CHALLENGE_CONFIG,
    CHALLENGE_IDS,
    CHALLENGE_REWARDS,
    CHALLENGE_STREAK,
    CHALLENGE_TIME,
)
from ..logics.activity_logic import (
    aggregate_sessions,
    calendar_intensity,
    cards_target_for_level,
    qualifies_for_streak,
    time_target_for_level,
)
from ..models import DailyChallenge
from ..schemas import ActivityAggregate, ChallengeProgress, ClaimResult, DailyChallengesDTO
from .activity_source import ActivitySource
from .progression_service import ProgressionService
from .user_guard import user_transaction


class DailyChallengeService:

    @staticmethod
    def _get_or_create(user, day: date) -> DailyChallenge:
        """Today's row; targets are frozen from the user's level at creation."""
        challenge = DailyChallenge.query.filter_by(user_id=user.user_id, date=day).first()
        if challenge is None:
            challenge = DailyChallenge(
                user_id=user.user_id,
                date=day,
                cards_target=cards_target_for_level(user.level or 1),
                time_target=time_target_for_level(user.level or 1),
                cards_reward_claimed=False,
                time_reward_claimed=False,
                streak_reward_claimed=False,
            )
            db.session.add(challenge)
            db.session.flush()
            current_app.logger.debug(
                f"[Gamification] Created daily challenges for user {user.user_id} on {day}: "
                f"cards={challenge.cards_target}, time={challenge.time_target}"
            )
        return challenge

    @staticmethod
    def _aggregate(user, day: date) -> ActivityAggregate:
        return aggregate_sessions(ActivitySource.sessions_on(user, day), current_app.logger)

    @staticmethod
    def _progress(challenge: DailyChallenge, aggregate: ActivityAggregate) -> DailyChallengesDTO:
        streak_done = qualifies_for_streak(aggregate)
        measured = {
            CHALLENGE_CARDS: (aggregate.correct_answers, challenge.cards_target),
            CHALLENGE_TIME: (aggregate.minutes, challenge.time_target),
            CHALLENGE_STREAK: (1 if streak_done else 0, 1),
        }

        challenges = []
        for challenge_id in CHALLENGE_IDS:
            progress, target = measured[challenge_id]
            config = CHALLENGE_CONFIG[challenge_id]
            challenges.append(ChallengeProgress(
                id=challenge_id,
                progress=progress,
                target=target,
                completed=progress >= target,
                reward_claimed=challenge.is_claimed(challenge_id),
                reward=CHALLENGE_REWARDS[challenge_id],
                title_key=config['title_key'],
                title_params={'target': target},
                icon=config['icon'],
                color=config['color'],
            ))

        return DailyChallengesDTO(
            date=challenge.date,
            challenges=challenges,
            correct_answers=aggregate.correct_answers,
            minutes=aggregate.minutes,
        )

    @staticmethod
    def get_today(user_id: int) -> DailyChallengesDTO:
        """Today's challenges with progress, creating today's row on first access."""
        with user_transaction(user_id) as user:
            today = user_today(user)
            challenge = DailyChallengeService._get_or_create(user, today)
            return DailyChallengeService._progress(challenge, DailyChallengeService._aggregate(user, today))

    @staticmethod
    def claim_reward(user_id: int, challenge_id: str) -> ClaimResult:
        """
        Pay out a completed challenge once per day.

        Raises:
            ValidationError: unknown challenge id.
            AlreadyClaimedError: reward already paid today.
            NotCompletedError: today's activity is below target.
        """
        if challenge_id not in CHALLENGE_IDS:
            raise ValidationError('Invalid challenge ID', errors={'challenge_id': challenge_id})

        with user_transaction(user_id) as user:
            today = user_today(user)
            challenge = DailyChallengeService._get_or_create(user, today)
            if challenge.is_claimed(challenge_id):
                raise AlreadyClaimedError(challenge_id)

            progress = DailyChallengeService._progress(
                challenge, DailyChallengeService._aggregate(user, today)
            ).get(challenge_id)
            if not progress.completed:
                raise NotCompletedError(challenge_id, progress.progress, progress.target)

            challenge.mark_claimed(challenge_id)
            reward = CHALLENGE_REWARDS[challenge_id]
            result = ProgressionService.apply_xp_delta(user_id, reward, reason=f'daily_challenge:{challenge_id}')

        current_app.logger.info(
            f"[Gamification] User {user_id} claimed {challenge_id} challenge (+{reward} XP)"
        )
        return ClaimResult(
            challenge_id=challenge_id,
            xp_earned=reward,
            leveled_up=result.leveled_up,
            old_level=result.old_level,
            new_level=result.level,
        )

    @staticmethod
    def _claimed_rewards_between(user, first_day: date, last_day: date) -> dict:
        """XP paid out for daily challenges, by challenge date."""
        rows = DailyChallenge.query.filter(
            DailyChallenge.user_id == user.user_id,
            DailyChallenge.date >= first_day,
            DailyChallenge.date <= last_day,
        ).all()
        return {
            row.date: sum(CHALLENGE_REWARDS[cid] for cid in CHALLENGE_IDS if row.is_claimed(cid))
            for row in rows
        }

    @staticmethod
    def get_activity_calendar(user_id: int, days: int = ACTIVITY_CALENDAR_DAYS,
                              today: Optional[date] = None) -> list:
        """
        One entry per local day, oldest first, ending today.

        ``xp_earned`` adds session XP, achievement rewards and claimed
        challenge rewards of that day.
        """
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f'User {user_id} not found', resource='user')

        today = today or user_today(user)
        window = ActivitySource.day_range(today, days)
        by_day = ActivitySource.sessions_between(user, window[0], today)
        achievement_xp = ActivitySource.achievement_xp_between(user, window[0], today)
        challenge_xp = DailyChallengeService._claimed_rewards_between(user, window[0], today)

        calendar = []
        for day in window:
            aggregate = aggregate_sessions(by_day.get(day, []), current_app.logger)
            studied = aggregate.correct_answers > 0 or aggregate.completed_sessions > 0
            calendar.append({
                'date': day.isoformat(),
                'studied': studied,
                'intensity': calendar_intensity(aggregate) if studied else 0,
                'cards': aggregate.correct_answers,
                'minutes': aggregate.minutes,
                'xp_earned': aggregate.session_xp + achievement_xp.get(day, 0) + challenge_xp.get(day, 0),
            })
        return calendar
