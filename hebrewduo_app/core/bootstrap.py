"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

import logging

from flask import Flask

from ..extensions import csrf_protect, db, login_manager
from .logging_config import setup_logging
from .module_registry import register_default_modules

BASE_THEME_TREE = {
    'Base': ['Salutations', 'Nourriture', 'Voyage'],
}


def configure_logging(app: Flask) -> None:
    """Configure application logging if no handlers are present."""

    if app.logger.handlers:
        return

    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)
    app.logger.propagate = False

    if app.config.get('LOG_TO_FILE'):
        setup_logging(
            app,
            log_level=app.config.get('LOG_LEVEL', 'INFO'),
            log_dir=app.config.get('LOG_DIR'),
            json_format=app.config.get('LOG_JSON', False),
        )

    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        from flask import abort

        abort(401)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)


def initialize_database(app: Flask) -> None:
    """Create database tables and ensure the default data exists."""

    from ..models import Theme, User

    db.create_all()

    admin_user = User.query.filter_by(user_role=User.ROLE_ADMIN).first()
    if admin_user is None:
        admin = User(
            email=app.config['DEFAULT_ADMIN_EMAIL'],
            display_name='Admin',
            user_role=User.ROLE_ADMIN,
        )
        admin.set_password(app.config['DEFAULT_ADMIN_PASSWORD'])
        db.session.add(admin)
        db.session.commit()
        app.logger.info("Default admin created: %s", admin.email)
    else:
        app.logger.info("Existing admin detected, skipping default admin creation.")

    if app.config.get('SEED_BASE_THEMES') and Theme.query.count() == 0:
        for root_name, children in BASE_THEME_TREE.items():
            root = Theme(name=root_name)
            db.session.add(root)
            db.session.flush()
            for child_name in children:
                db.session.add(Theme(name=child_name, parent_id=root.theme_id))
        db.session.commit()
        app.logger.info("Base themes created.")
