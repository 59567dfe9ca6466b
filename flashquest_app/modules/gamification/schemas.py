from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class ProgressionState:
    level: int
    current_xp: int
    next_level_xp: int
    total_xp: int


@dataclass
class ProgressionResult:
    """Outcome of one ledger mutation."""
    user_id: int
    level: int
    current_xp: int
    next_level_xp: int
    total_xp: int
    old_level: int
    delta: int = 0

    @property
    def leveled_up(self) -> bool:
        return self.level > self.old_level

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['leveled_up'] = self.leveled_up
        return data


@dataclass(frozen=True)
class SessionContext:
    """Outcome of a single study session, for session-scoped achievement rules."""
    correct_count: int
    duration_seconds: int
    total_cards: int = 0
    completed_at_hour: Optional[int] = None  # 0-23, user local time
    score: int = 0  # 0-100
    session_xp: int = 0


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a study session as supplied by the session subsystem."""
    session_id: int
    status: str
    correct_count: Optional[int]
    duration_seconds: int
    answers: Mapping[str, str]
    started_at: Optional[datetime] = None
    session_xp: int = 0


@dataclass
class ActivityAggregate:
    correct_answers: int = 0
    minutes: int = 0
    session_xp: int = 0
    sessions: int = 0
    completed_sessions: int = 0


@dataclass
class UserStats:
    """Mutable in-memory stat snapshot used for one evaluation pass."""
    level: int
    streak: int
    total_cards_learned: int
    total_decks_completed: int
    total_xp: int


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    title: str
    condition_type: str
    condition_value: int
    xp_reward: int
    tier: str = 'bronze'
    description: str = ''
    icon: str = 'award'
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'title_key': f'items.{self.id}.title',
            'description_key': f'items.{self.id}.description',
            'icon': self.icon,
            'color': self.color,
            'xp_reward': self.xp_reward,
            'tier': self.tier,
            'condition_type': self.condition_type,
            'condition_value': self.condition_value,
        }


@dataclass
class ChallengeProgress:
    id: str
    progress: int
    target: int
    completed: bool
    reward_claimed: bool
    reward: int
    title_key: str = ''
    title_params: Dict[str, Any] = field(default_factory=dict)
    icon: str = ''
    color: str = ''


@dataclass
class DailyChallengesDTO:
    date: date
    challenges: List[ChallengeProgress]
    correct_answers: int
    minutes: int

    def get(self, challenge_id: str) -> Optional[ChallengeProgress]:
        for challenge in self.challenges:
            if challenge.id == challenge_id:
                return challenge
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'challenges': [asdict(c) for c in self.challenges],
            'today': {'correct_answers': self.correct_answers, 'minutes': self.minutes},
        }


@dataclass
class ClaimResult:
    challenge_id: str
    xp_earned: int
    leveled_up: bool
    old_level: int
    new_level: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StreakDTO:
    user_id: int
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[str]
    qualifies_today: bool = False
