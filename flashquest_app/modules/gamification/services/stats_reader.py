"""
Stats Reader
Query-backed counters for achievement rules and the user stat snapshot.
"""
from sqlalchemy import and_, case, func

from flashquest_app.extensions import db
from flashquest_app.models import Card, CardProgress, Deck, StudySession
from ..schemas import UserStats


def stats_snapshot(user) -> UserStats:
    return UserStats(
        level=user.level or 1,
        streak=user.streak or 0,
        total_cards_learned=user.total_cards_learned or 0,
        total_decks_completed=user.total_decks_completed or 0,
        total_xp=user.total_xp or 0,
    )


class UserCounters:
    """Lazy, memoized counts for one evaluation call; nothing is queried until a rule asks."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        self._cache = {}

    def _memo(self, key, loader):
        if key not in self._cache:
            self._cache[key] = loader()
        return self._cache[key]

    def decks_created(self) -> int:
        return self._memo('decks_created', lambda: Deck.query.filter(
            Deck.owner_id == self.user_id,
            Deck.deleted_at.is_(None),
        ).count())

    def sessions_completed(self) -> int:
        return self._memo('sessions_completed', lambda: StudySession.query.filter_by(
            user_id=self.user_id,
            status=StudySession.STATUS_COMPLETED,
        ).count())

    def mastered_decks(self) -> int:
        """Decks with at least one live card, every one of them mastered by this user."""
        def load():
            mastered = case((CardProgress.status == CardProgress.STATUS_MASTERED, 1), else_=0)
            per_deck = (
                db.session.query(Card.deck_id)
                .join(Deck, Deck.deck_id == Card.deck_id)
                .outerjoin(CardProgress, and_(
                    CardProgress.card_id == Card.card_id,
                    CardProgress.user_id == self.user_id,
                ))
                .filter(Card.deleted_at.is_(None), Deck.deleted_at.is_(None))
                .group_by(Card.deck_id)
                .having(func.count(Card.card_id) == func.sum(mastered))
            )
            return per_deck.count()
        return self._memo('mastered_decks', load)
