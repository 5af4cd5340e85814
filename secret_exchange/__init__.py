from __future__ import annotations

import click
from flask import Flask

from .config import load_config
from .core import init_core
from .errors import register_error_handlers
from .extensions import db, login_manager, migrate
from .logging_config import setup_logging
from .views.admin import admin_bp, assignments_bp
from .views.participants import participants_bp
from .views.public import public_bp


def create_app(test_config: dict | None = None, core=None) -> Flask:
    app = Flask(__name__)

    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    setup_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    init_core(app, core)
    register_error_handlers(app)

    # Blueprints
    app.register_blueprint(public_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(assignments_bp)
    app.register_blueprint(participants_bp)

    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables ready")

    return app
