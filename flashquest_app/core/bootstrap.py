"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

from flask import Flask

from ..extensions import csrf_protect, db, login_manager
from .error_handlers import error_response
from .error_handlers import register_error_handlers as _register_error_handlers
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Attach the FlashQuest handlers to the app logger."""

    setup_logging(
        app.logger,
        log_level=app.config.get("LOG_LEVEL", "INFO"),
        log_dir=app.config.get("LOG_DIR"),
        json_format=app.config.get("LOG_JSON", False),
        to_file=app.config.get("LOG_TO_FILE", False),
    )


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)


def register_user_loader(app: Flask) -> None:
    """Resolve the session user for Flask-Login and answer API calls with JSON 401."""

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return error_response("Authentication required", "UNAUTHENTICATED", 401)


def register_error_handlers(app: Flask) -> None:
    _register_error_handlers(app)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)


def initialize_database(app: Flask) -> None:
    """Create database tables, seed the achievement catalog and load it."""

    from ..modules.gamification.services.catalog_service import CatalogService
    from .achievement_seeds import seed_achievements

    db.create_all()

    if app.config.get("SEED_ACHIEVEMENTS", True):
        created = seed_achievements()
        if created:
            app.logger.info("Seeded %d default achievements.", created)

    CatalogService.reload_catalog()
