from flashquest_app.extensions import db
from flashquest_app.modules.gamification.constants import ConditionType
from flashquest_app.modules.gamification.models import Achievement

DEFAULT_ACHIEVEMENTS = [
    # --- LIFETIME PROGRESS ---
    {
        "achievement_id": "a1",
        "title": "First Step",
        "description": "Complete your first deck",
        "icon": "target",
        "color": "bg-yellow-100 text-yellow-600",
        "xp_reward": 50,
        "condition_type": ConditionType.DECKS_COMPLETED,
        "condition_value": 1,
        "tier": "bronze",
    },
    {
        "achievement_id": "a2",
        "title": "Shining Star",
        "description": "Study 5 days in a row",
        "icon": "star",
        "color": "bg-blue-100 text-blue-600",
        "xp_reward": 100,
        "condition_type": ConditionType.STREAK_DAYS,
        "condition_value": 5,
        "tier": "bronze",
    },
    {
        "achievement_id": "a3",
        "title": "Lightning Fast",
        "description": "Answer 10 cards correctly per minute",
        "icon": "zap",
        "color": "bg-purple-100 text-purple-600",
        "xp_reward": 75,
        "condition_type": ConditionType.CARDS_PER_MINUTE,
        "condition_value": 10,
        "tier": "silver",
    },
    {
        "achievement_id": "a4",
        "title": "Librarian",
        "description": "Create 3 decks",
        "icon": "library",
        "color": "bg-green-100 text-green-600",
        "xp_reward": 60,
        "condition_type": ConditionType.DECKS_CREATED,
        "condition_value": 3,
        "tier": "bronze",
    },
    {
        "achievement_id": "a5",
        "title": "Living Flame",
        "description": "Keep a 7 day streak",
        "icon": "flame",
        "color": "bg-orange-100 text-orange-600",
        "xp_reward": 150,
        "condition_type": ConditionType.STREAK_DAYS,
        "condition_value": 7,
        "tier": "silver",
    },
    {
        "achievement_id": "a6",
        "title": "Diamond",
        "description": "Master 100 cards",
        "icon": "diamond",
        "color": "bg-indigo-100 text-indigo-600",
        "xp_reward": 200,
        "condition_type": ConditionType.CARDS_MASTERED,
        "condition_value": 100,
        "tier": "gold",
    },
    {
        "achievement_id": "a7",
        "title": "Master",
        "description": "Reach level 10",
        "icon": "crown",
        "color": "bg-amber-100 text-amber-600",
        "xp_reward": 500,
        "condition_type": ConditionType.LEVEL_REACHED,
        "condition_value": 10,
        "tier": "gold",
    },
    {
        "achievement_id": "a8",
        "title": "Dedicated",
        "description": "Keep a 30 day streak",
        "icon": "calendar",
        "color": "bg-red-100 text-red-600",
        "xp_reward": 1000,
        "condition_type": ConditionType.STREAK_DAYS,
        "condition_value": 30,
        "tier": "platinum",
    },

    # --- SESSION FEATS ---
    {
        "achievement_id": "early_bird",
        "title": "Early Bird",
        "description": "Finish a session between 05:00 and 09:00",
        "icon": "sunrise",
        "color": "bg-sky-100 text-sky-600",
        "xp_reward": 40,
        "condition_type": ConditionType.SESSION_TIME_OF_DAY,
        "condition_value": 500,
        "tier": "bronze",
    },
    {
        "achievement_id": "night_owl",
        "title": "Night Owl",
        "description": "Finish a session between 23:00 and 04:00",
        "icon": "moon",
        "color": "bg-slate-100 text-slate-600",
        "xp_reward": 40,
        "condition_type": ConditionType.SESSION_TIME_OF_DAY,
        "condition_value": 2300,
        "tier": "bronze",
    },
    {
        "achievement_id": "flawless_20",
        "title": "Flawless",
        "description": "Score 100% in a session of at least 20 cards",
        "icon": "check-circle",
        "color": "bg-emerald-100 text-emerald-600",
        "xp_reward": 120,
        "condition_type": ConditionType.PERFECT_SCORE_MIN_CARDS,
        "condition_value": 20,
        "tier": "silver",
    },
    {
        "achievement_id": "xp_burst_200",
        "title": "XP Burst",
        "description": "Earn 200 XP in a single session",
        "icon": "trending-up",
        "color": "bg-pink-100 text-pink-600",
        "xp_reward": 80,
        "condition_type": ConditionType.SINGLE_SESSION_XP,
        "condition_value": 200,
        "tier": "silver",
    },

    # --- MILESTONES ---
    {
        "achievement_id": "sessions_50",
        "title": "Regular",
        "description": "Complete 50 study sessions",
        "icon": "repeat",
        "color": "bg-teal-100 text-teal-600",
        "xp_reward": 250,
        "condition_type": ConditionType.TOTAL_SESSIONS_COMPLETED,
        "condition_value": 50,
        "tier": "gold",
    },
    {
        "achievement_id": "xp_5000",
        "title": "Scholar",
        "description": "Earn 5,000 XP in total",
        "icon": "book",
        "color": "bg-violet-100 text-violet-600",
        "xp_reward": 300,
        "condition_type": ConditionType.TOTAL_XP,
        "condition_value": 5000,
        "tier": "gold",
    },
    {
        "achievement_id": "deck_master",
        "title": "Deck Master",
        "description": "Master every card of a deck",
        "icon": "layers",
        "color": "bg-lime-100 text-lime-600",
        "xp_reward": 150,
        "condition_type": ConditionType.CARDS_MASTERED_SINGLE_DECK,
        "condition_value": 1,
        "tier": "silver",
    },
]


def seed_achievements() -> int:
    """Insert missing default achievements. Returns how many were created."""
    existing_ids = {row.achievement_id for row in db.session.query(Achievement.achievement_id).all()}

    created = 0
    for data in DEFAULT_ACHIEVEMENTS:
        if data["achievement_id"] in existing_ids:
            continue
        values = dict(data, condition_type=data["condition_type"].value)
        db.session.add(Achievement(**values))
        created += 1

    if created:
        db.session.commit()
    return created
