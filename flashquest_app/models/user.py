"""User model: account identity plus progression and lifetime study stats."""

from __future__ import annotations

from flask_login import UserMixin
from sqlalchemy.sql import func
from werkzeug.security import check_password_hash, generate_password_hash

from ..db_instance import db


def _base_level_xp() -> int:
    # Imported lazily: the gamification package imports this model
    from ..modules.gamification.constants import BASE_LEVEL_XP

    return BASE_LEVEL_XP


class User(UserMixin, db.Model):
    """Application user model."""

    __tablename__ = 'users'

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    timezone = db.Column(db.String(50), default='UTC')

    # Progression (owned by the progression ledger)
    level = db.Column(db.Integer, nullable=False, default=1)
    current_xp = db.Column(db.Integer, nullable=False, default=0)
    next_level_xp = db.Column(db.Integer, nullable=False, default=_base_level_xp)
    total_xp = db.Column(db.Integer, nullable=False, default=0)

    # Streak (refreshed on session completion)
    streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    last_active_date = db.Column(db.Date)

    # Lifetime stats
    total_time_spent = db.Column(db.Integer, nullable=False, default=0)  # minutes
    total_cards_learned = db.Column(db.Integer, nullable=False, default=0)
    total_decks_completed = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())

    def get_id(self):
        return str(self.user_id)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'
