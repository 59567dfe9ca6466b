"""Deck and card tables read by the progression engine.

Deck/card CRUD lives elsewhere; only the columns the engine counts on are
modelled here.
"""

from sqlalchemy.sql import func

from ..db_instance import db


class Deck(db.Model):
    __tablename__ = 'decks'

    deck_id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    deleted_at = db.Column(db.DateTime(timezone=True))

    cards = db.relationship('Card', backref='deck', lazy=True)

    def __repr__(self):
        return f'<Deck {self.title}>'


class Card(db.Model):
    __tablename__ = 'cards'

    card_id = db.Column(db.Integer, primary_key=True)
    deck_id = db.Column(db.Integer, db.ForeignKey('decks.deck_id'), nullable=False, index=True)
    front = db.Column(db.Text, nullable=False)
    back = db.Column(db.Text, nullable=False)
    deleted_at = db.Column(db.DateTime(timezone=True))


class CardProgress(db.Model):
    """Per-user card status, as decided by the card scheduler."""
    __tablename__ = 'card_progress'

    STATUS_NEW = 'new'
    STATUS_LEARNING = 'learning'
    STATUS_REVIEW = 'review'
    STATUS_MASTERED = 'mastered'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    card_id = db.Column(db.Integer, db.ForeignKey('cards.card_id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_NEW)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (db.UniqueConstraint('user_id', 'card_id', name='_user_card_progress_uc'),)
