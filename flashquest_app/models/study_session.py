from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..db_instance import db


class StudySession(db.Model):
    """
    A single study run over a deck.

    While a session is active, progress lives in the ``answers`` map
    (card attempt id -> 'correct' | 'incorrect' | 'skipped') and the live
    ``duration_seconds``. The finalized counters are written on completion.
    """
    __tablename__ = 'study_sessions'

    STATUS_ACTIVE = 'active'
    STATUS_COMPLETED = 'completed'

    ANSWER_CORRECT = 'correct'
    ANSWER_INCORRECT = 'incorrect'
    ANSWER_SKIPPED = 'skipped'

    session_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    deck_id = db.Column(db.Integer, db.ForeignKey('decks.deck_id'), nullable=True)

    status = db.Column(db.String(20), nullable=False, default=STATUS_ACTIVE, index=True)
    total_cards = db.Column(db.Integer, nullable=False, default=0)

    # Live progress
    answers = db.Column(JSON, default=dict)
    session_xp = db.Column(db.Integer, nullable=False, default=0)
    duration_seconds = db.Column(db.Integer, nullable=False, default=0)

    # Final results (populated when status = 'completed')
    score = db.Column(db.Integer)
    correct_count = db.Column(db.Integer)
    incorrect_count = db.Column(db.Integer)
    skipped_count = db.Column(db.Integer)

    started_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    last_activity = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
    completed_at = db.Column(db.DateTime(timezone=True))

    __table_args__ = (
        db.Index('ix_study_sessions_user_started', 'user_id', 'started_at'),
    )

    def to_dict(self):
        """Serialize session to dictionary."""
        return {
            'session_id': self.session_id,
            'user_id': self.user_id,
            'deck_id': self.deck_id,
            'status': self.status,
            'total_cards': self.total_cards,
            'answers': self.answers or {},
            'session_xp': self.session_xp,
            'duration_seconds': self.duration_seconds,
            'score': self.score,
            'correct_count': self.correct_count,
            'incorrect_count': self.incorrect_count,
            'skipped_count': self.skipped_count,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE
