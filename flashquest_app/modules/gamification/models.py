from flashquest_app.db_instance import db
from sqlalchemy.sql import func


class Achievement(db.Model):
    """Achievement catalog entry (seeded, read-only at runtime)."""
    __tablename__ = 'achievements'

    achievement_id = db.Column(db.String(50), primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    icon = db.Column(db.String(50), nullable=False, default='award')
    color = db.Column(db.String(100))

    # Unlock rule
    condition_type = db.Column(db.String(50), nullable=False)
    condition_value = db.Column(db.Integer, nullable=False)

    xp_reward = db.Column(db.Integer, nullable=False, default=0)
    tier = db.Column(db.String(20), nullable=False, default='bronze')
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f'<Achievement {self.achievement_id}>'


class UserAchievement(db.Model):
    """One row per user and achievement; its existence means 'unlocked'."""
    __tablename__ = 'user_achievements'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    achievement_id = db.Column(db.String(50), db.ForeignKey('achievements.achievement_id'), nullable=False)
    unlocked_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    xp_awarded = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (db.UniqueConstraint('user_id', 'achievement_id', name='_user_achievement_uc'),)

    def to_dict(self):
        return {
            'achievement_id': self.achievement_id,
            'xp_awarded': self.xp_awarded,
            'unlocked_at': self.unlocked_at.isoformat() if self.unlocked_at else None
        }


class DailyChallenge(db.Model):
    """Per-user, per-day challenge targets and reward claim flags."""
    __tablename__ = 'daily_challenges'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    date = db.Column(db.Date, nullable=False)

    # Targets are frozen at creation
    cards_target = db.Column(db.Integer, nullable=False, default=30)
    time_target = db.Column(db.Integer, nullable=False, default=20)  # minutes

    cards_reward_claimed = db.Column(db.Boolean, nullable=False, default=False)
    time_reward_claimed = db.Column(db.Boolean, nullable=False, default=False)
    streak_reward_claimed = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='_user_daily_challenge_uc'),
        db.Index('ix_daily_challenges_user_date', 'user_id', 'date'),
    )

    def is_claimed(self, challenge_id: str) -> bool:
        return bool(getattr(self, f'{challenge_id}_reward_claimed'))

    def mark_claimed(self, challenge_id: str) -> None:
        setattr(self, f'{challenge_id}_reward_claimed', True)
