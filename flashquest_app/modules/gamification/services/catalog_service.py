"""
Catalog Service
Builds the immutable achievement catalog from the achievements table.
"""
from flask import current_app

from flashquest_app.extensions import db
from ..models import Achievement
from ..logics.catalog import AchievementCatalog
from ..schemas import AchievementDefinition

EXTENSION_KEY = 'achievement_catalog'


class CatalogService:

    @staticmethod
    def to_definition(row: Achievement) -> AchievementDefinition:
        return AchievementDefinition(
            id=row.achievement_id,
            title=row.title,
            condition_type=row.condition_type,
            condition_value=row.condition_value,
            xp_reward=row.xp_reward or 0,
            tier=row.tier or 'bronze',
            description=row.description or '',
            icon=row.icon or 'award',
            color=row.color,
        )

    @staticmethod
    def load_catalog() -> AchievementCatalog:
        """Read active achievements, ordered by id."""
        rows = db.session.execute(
            db.select(Achievement)
            .filter_by(is_active=True)
            .order_by(Achievement.achievement_id)
        ).scalars().all()
        catalog = AchievementCatalog(CatalogService.to_definition(r) for r in rows)
        current_app.logger.info(f"[Gamification] Loaded {len(catalog)} achievements")
        return catalog

    @staticmethod
    def get_catalog() -> AchievementCatalog:
        """Catalog cached on the app at startup, loaded on demand otherwise."""
        catalog = current_app.extensions.get(EXTENSION_KEY)
        if catalog is None:
            catalog = CatalogService.load_catalog()
            current_app.extensions[EXTENSION_KEY] = catalog
        return catalog

    @staticmethod
    def reload_catalog() -> AchievementCatalog:
        catalog = CatalogService.load_catalog()
        current_app.extensions[EXTENSION_KEY] = catalog
        return catalog
