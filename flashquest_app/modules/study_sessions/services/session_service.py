"""
Study Session Service
=====================
Lifecycle of a study session: start, auto-save while active, complete once.

Auto-save credits only the XP earned since the previous save, so completion
never credits session XP a second time. Every write runs inside the user's
progression transaction. A failing achievement check during auto-save is
rolled back on its own and never costs the saved progress.
"""

from typing import Iterable, Mapping, Optional

from flask import current_app

from flashquest_app.extensions import db
from flashquest_app.core.error_handlers import (
    AuthorizationError,
    NotFoundError,
    SessionAlreadyCompletedError,
    ValidationError,
)
from flashquest_app.models import Card, CardProgress, Deck, StudySession
from flashquest_app.modules.gamification.interface import (
    apply_xp_delta,
    evaluate_achievements,
    refresh_streak,
    savepoint,
    user_transaction,
)
from flashquest_app.modules.gamification.schemas import SessionContext
from flashquest_app.utils.time_utils import user_local_hour, utcnow

VALID_ANSWERS = frozenset({
    StudySession.ANSWER_CORRECT,
    StudySession.ANSWER_INCORRECT,
    StudySession.ANSWER_SKIPPED,
})


def _non_negative_int(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f'{field_name} must be a non-negative integer', errors={field_name: value})
    return value


def _validate_answers(answers) -> dict:
    if not isinstance(answers, Mapping):
        raise ValidationError('answers must be an object', errors={'answers': type(answers).__name__})
    invalid = {str(k): v for k, v in answers.items() if v not in VALID_ANSWERS}
    if invalid:
        raise ValidationError('Unknown answer outcome', errors=invalid)
    return {str(k): v for k, v in answers.items()}


def _score_for(correct: int, total_cards: int) -> int:
    return round(correct / total_cards * 100) if total_cards > 0 else 0


def _progression_payload(user, old_level: int) -> dict:
    return {
        'level': user.level,
        'current_xp': user.current_xp,
        'next_level_xp': user.next_level_xp,
        'total_xp': user.total_xp,
        'old_level': old_level,
        'leveled_up': user.level > old_level,
    }


class StudySessionService:

    @staticmethod
    def _owned_session(user_id: int, session_id: int) -> StudySession:
        session = db.session.get(StudySession, session_id)
        if session is None:
            raise NotFoundError('Session not found', resource='study_session')
        if session.user_id != user_id:
            raise AuthorizationError('You cannot modify this session')
        return session

    @staticmethod
    def get_session(user_id: int, session_id: int) -> StudySession:
        return StudySessionService._owned_session(user_id, session_id)

    @staticmethod
    def start_session(user_id: int, deck_id: Optional[int] = None, total_cards: int = 0) -> dict:
        total_cards = _non_negative_int(total_cards, 'total_cards')
        with user_transaction(user_id):
            if deck_id is not None:
                deck = db.session.get(Deck, deck_id)
                if deck is None or deck.deleted_at is not None:
                    raise NotFoundError('Deck not found', resource='deck')

            session = StudySession(
                user_id=user_id,
                deck_id=deck_id,
                status=StudySession.STATUS_ACTIVE,
                total_cards=total_cards,
                answers={},
                session_xp=0,
                duration_seconds=0,
                started_at=utcnow(),
            )
            db.session.add(session)
            db.session.flush()
            payload = session.to_dict()

        current_app.logger.info(f"[StudySession] User {user_id} started session {payload['session_id']}")
        return payload

    @staticmethod
    def autosave(user_id: int, session_id: int, answers: Optional[Mapping] = None,
                 session_xp: Optional[int] = None, duration_seconds: Optional[int] = None) -> dict:
        """
        Store live progress of an active session.

        Returns:
            dict with 'session', 'user' (progression) and 'new_achievements'
        """
        if answers is not None:
            answers = _validate_answers(answers)
        if session_xp is not None:
            session_xp = _non_negative_int(session_xp, 'session_xp')
        if duration_seconds is not None:
            duration_seconds = _non_negative_int(duration_seconds, 'duration_seconds')

        with user_transaction(user_id) as user:
            session = StudySessionService._owned_session(user_id, session_id)
            old_level = user.level
            if not session.is_active:
                raise SessionAlreadyCompletedError(session_id)

            if answers is not None:
                session.answers = answers
            if duration_seconds is not None:
                session.duration_seconds = duration_seconds

            increment = 0
            if session_xp is not None:
                increment = max(0, session_xp - (session.session_xp or 0))
                session.session_xp = max(session_xp, session.session_xp or 0)
            session.last_activity = utcnow()

            apply_xp_delta(user_id, increment, reason=f'session:{session_id}')

            new_achievements = []
            live_answers = session.answers or {}
            if live_answers:
                correct = sum(1 for v in live_answers.values() if v == StudySession.ANSWER_CORRECT)
                context = SessionContext(
                    correct_count=correct,
                    duration_seconds=session.duration_seconds or 0,
                    total_cards=session.total_cards or 0,
                    completed_at_hour=user_local_hour(user),
                    score=_score_for(correct, session.total_cards or 0),
                    session_xp=session.session_xp or 0,
                )
                try:
                    with savepoint():
                        new_achievements = evaluate_achievements(user_id, context)
                except Exception:
                    current_app.logger.error(
                        f"[StudySession] Achievement check failed during auto-save of session {session_id}",
                        exc_info=True,
                    )
                    new_achievements = []

            payload = session.to_dict()
            progression = _progression_payload(user, old_level)

        return {
            'session': payload,
            'user': progression,
            'new_achievements': [a.to_dict() for a in new_achievements],
        }

    @staticmethod
    def complete(user_id: int, session_id: int, score: int, correct_count: int,
                 incorrect_count: int = 0, skipped_count: int = 0,
                 duration_seconds: Optional[int] = None, session_xp: Optional[int] = None,
                 cards_learned: int = 0, mastered_card_ids: Iterable[int] = ()) -> dict:
        """
        Finalize a session, update lifetime stats and the streak, then evaluate achievements.

        Raises:
            SessionAlreadyCompletedError: the session was finalized before.
        """
        score = _non_negative_int(score, 'score')
        if score > 100:
            raise ValidationError('score must be between 0 and 100', errors={'score': score})
        correct_count = _non_negative_int(correct_count, 'correct_count')
        incorrect_count = _non_negative_int(incorrect_count, 'incorrect_count')
        skipped_count = _non_negative_int(skipped_count, 'skipped_count')
        cards_learned = _non_negative_int(cards_learned, 'cards_learned')
        if duration_seconds is not None:
            duration_seconds = _non_negative_int(duration_seconds, 'duration_seconds')
        if session_xp is not None:
            session_xp = _non_negative_int(session_xp, 'session_xp')
        mastered_card_ids = [_non_negative_int(cid, 'mastered_card_ids') for cid in mastered_card_ids]

        with user_transaction(user_id) as user:
            session = StudySessionService._owned_session(user_id, session_id)
            old_level = user.level
            if session.status == StudySession.STATUS_COMPLETED:
                raise SessionAlreadyCompletedError(session_id)

            now = utcnow()
            if duration_seconds is not None:
                session.duration_seconds = duration_seconds
            session.status = StudySession.STATUS_COMPLETED
            session.score = score
            session.correct_count = correct_count
            session.incorrect_count = incorrect_count
            session.skipped_count = skipped_count
            session.completed_at = now
            session.last_activity = now

            # Only XP not yet credited by auto-save
            increment = 0
            if session_xp is not None:
                increment = max(0, session_xp - (session.session_xp or 0))
                session.session_xp = max(session_xp, session.session_xp or 0)

            user.total_cards_learned = (user.total_cards_learned or 0) + cards_learned
            user.total_decks_completed = (user.total_decks_completed or 0) + 1
            user.total_time_spent = (user.total_time_spent or 0) + (session.duration_seconds or 0) // 60

            StudySessionService._mark_mastered(user_id, mastered_card_ids)

            apply_xp_delta(user_id, increment, reason=f'session:{session_id}')
            db.session.flush()

            streak = refresh_streak(user_id)
            context = SessionContext(
                correct_count=correct_count,
                duration_seconds=session.duration_seconds or 0,
                total_cards=session.total_cards or 0,
                completed_at_hour=user_local_hour(user, now),
                score=score,
                session_xp=session.session_xp or 0,
            )
            new_achievements = evaluate_achievements(user_id, context)

            payload = session.to_dict()
            progression = _progression_payload(user, old_level)

        current_app.logger.info(
            f"[StudySession] User {user_id} completed session {session_id}: "
            f"score={score}, correct={correct_count}, streak={streak.current_streak}"
        )
        return {
            'session': payload,
            'xp_earned': increment,
            'user': progression,
            'streak': streak.current_streak,
            'longest_streak': streak.longest_streak,
            'new_achievements': [a.to_dict() for a in new_achievements],
        }

    @staticmethod
    def _mark_mastered(user_id: int, card_ids: Iterable[int]) -> None:
        card_ids = set(card_ids)
        if not card_ids:
            return
        known = {row.card_id for row in Card.query.filter(Card.card_id.in_(card_ids)).all()}
        unknown = sorted(card_ids - known)
        if unknown:
            raise ValidationError('Unknown cards in mastered_card_ids', errors={'mastered_card_ids': unknown})

        for card_id in card_ids:
            progress = CardProgress.query.filter_by(user_id=user_id, card_id=card_id).first()
            if progress is None:
                progress = CardProgress(user_id=user_id, card_id=card_id)
                db.session.add(progress)
            progress.status = CardProgress.STATUS_MASTERED
