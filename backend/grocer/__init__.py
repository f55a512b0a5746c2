# backend/grocer/__init__.py
from __future__ import annotations

from flask import Flask

from .config import Config
from .extensions import grocer_store
from .logging_utils import configure_logging


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # Load (or seed) catalog, ledger and settings
    grocer_store.init_app(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.categories import categories_bp
    from .routes.products import products_bp
    from .routes.sales import sales_bp
    from .routes.reports import reports_bp
    from .routes.settings import settings_bp
    from .routes.imports import imports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(imports_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
