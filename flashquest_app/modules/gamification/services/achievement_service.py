"""
Achievement Service
===================
Evaluates the achievement catalog for a user and unlocks what is newly met.

Evaluation is triggered from several places (auto-save, session completion,
the evaluate endpoint) and may run twice for the same state. The unique
(user_id, achievement_id) row is what makes it exactly-once: XP is credited
only when this call's insert actually created the row.
"""

from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from flashquest_app.extensions import db
from flashquest_app.models import User
from flashquest_app.core.error_handlers import NotFoundError
from flashquest_app.core.signals import achievement_unlocked
from flashquest_app.utils.time_utils import utcnow
from ..models import UserAchievement
from ..logics.achievement_rules import InvalidConditionTypeError, condition_met
from ..logics.catalog import AchievementCatalog
from ..schemas import AchievementDefinition, SessionContext
from .catalog_service import CatalogService
from .progression_service import ProgressionService
from .stats_reader import UserCounters, stats_snapshot
from .user_guard import defer_signal, user_transaction

_INSERT_IGNORE = {
    'sqlite': sqlite_insert,
    'postgresql': pg_insert,
}


class AchievementService:

    @staticmethod
    def unlocked_ids(user_id: int) -> set:
        rows = db.session.execute(
            db.select(UserAchievement.achievement_id).filter_by(user_id=user_id)
        ).scalars()
        return set(rows)

    @staticmethod
    def candidates(user_id: int, catalog: AchievementCatalog) -> List[AchievementDefinition]:
        """Catalog entries the user has not unlocked yet."""
        return catalog.excluding(AchievementService.unlocked_ids(user_id))

    @staticmethod
    def try_unlock(user_id: int, definition: AchievementDefinition) -> bool:
        """
        Insert the unlock row unless it already exists.

        Returns True only when this call created the row.
        """
        values = dict(
            user_id=user_id,
            achievement_id=definition.id,
            xp_awarded=definition.xp_reward,
            unlocked_at=utcnow(),
        )
        insert = _INSERT_IGNORE.get(db.engine.dialect.name)
        if insert is not None:
            stmt = insert(UserAchievement).values(**values).on_conflict_do_nothing(
                index_elements=['user_id', 'achievement_id']
            )
            return db.session.execute(stmt).rowcount == 1

        exists = db.session.execute(
            db.select(UserAchievement.id).filter_by(user_id=user_id, achievement_id=definition.id)
        ).first()
        if exists:
            return False
        try:
            with db.session.begin_nested():
                db.session.add(UserAchievement(**values))
        except IntegrityError:
            return False
        return True

    @staticmethod
    def evaluate(
        user_id: int,
        context: Optional[SessionContext] = None,
        catalog: Optional[AchievementCatalog] = None
    ) -> List[AchievementDefinition]:
        """
        Unlock every achievement the user now meets and credit its XP.

        Passes repeat until one unlocks nothing, so an XP reward that lifts the
        level or total XP can chain into further unlocks within the same call.
        Returns only achievements unlocked by this call.
        """
        catalog = catalog if catalog is not None else CatalogService.get_catalog()
        newly_unlocked = []

        with user_transaction(user_id) as user:
            stats = stats_snapshot(user)
            counters = UserCounters(user_id)
            pending = AchievementService.candidates(user_id, catalog)

            while pending:
                still_locked = []
                unlocked_this_pass = False
                for definition in pending:
                    try:
                        met = condition_met(definition, stats, counters, context)
                    except InvalidConditionTypeError as e:
                        current_app.logger.warning(f"[Gamification] Skipping achievement {definition.id}: {e}")
                        continue
                    if not met:
                        still_locked.append(definition)
                        continue
                    if not AchievementService.try_unlock(user_id, definition):
                        current_app.logger.debug(
                            f"[Gamification] Achievement {definition.id} already unlocked for user {user_id}"
                        )
                        continue

                    result = ProgressionService.apply_xp_delta(
                        user_id, definition.xp_reward, reason=f'achievement:{definition.id}'
                    )
                    stats.level = result.level
                    stats.total_xp = result.total_xp
                    newly_unlocked.append(definition)
                    unlocked_this_pass = True
                    current_app.logger.info(
                        f"[Gamification] User {user_id} unlocked {definition.id} (+{definition.xp_reward} XP)"
                    )
                    defer_signal(
                        achievement_unlocked,
                        user_id=user_id,
                        achievement_id=definition.id,
                        xp_reward=definition.xp_reward,
                    )

                if not unlocked_this_pass:
                    break
                pending = still_locked

        return newly_unlocked

    @staticmethod
    def list_achievements(user_id: int, catalog: Optional[AchievementCatalog] = None) -> dict:
        """Whole catalog with the user's unlock state, cheapest reward first."""
        if db.session.get(User, user_id) is None:
            raise NotFoundError(f'User {user_id} not found', resource='user')
        catalog = catalog if catalog is not None else CatalogService.get_catalog()

        unlocks = {
            row.achievement_id: row
            for row in UserAchievement.query.filter_by(user_id=user_id).all()
        }
        items = []
        for definition in sorted(catalog, key=lambda d: (d.xp_reward, d.id)):
            unlock = unlocks.get(definition.id)
            item = definition.to_dict()
            item['unlocked'] = unlock is not None
            item['unlocked_at'] = unlock.unlocked_at.isoformat() if unlock and unlock.unlocked_at else None
            item['xp_awarded'] = unlock.xp_awarded if unlock else 0
            items.append(item)

        return {
            'achievements': items,
            'total_count': len(items),
            'unlocked_count': sum(1 for item in items if item['unlocked']),
        }

    @staticmethod
    def as_payload(definitions: Iterable[AchievementDefinition]) -> list:
        return [d.to_dict() for d in definitions]
