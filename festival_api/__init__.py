"""Flask Application Factory.

Creates and configures the Flask application using the factory pattern.
This allows for multiple instances (testing, development, production).
"""

from __future__ import annotations

import os
from pathlib import Path

from flask import Flask

from festival_core.config import Config, load_config
from festival_core.geocoding import GeocodeCache

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent


def create_app(config_name: str | None = None, core_config: Config | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name ('development', 'testing', 'production')
                    If None, uses FLASK_ENV or defaults to 'development'
        core_config: Dataset/geocoding configuration, defaults to ``load_config()``

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    _configure_app(app, config_name, core_config)

    # One geocode cache per application process
    app.extensions["geocode_cache"] = GeocodeCache()

    # Register blueprints
    _register_blueprints(app)

    # Register CLI commands
    _register_cli_commands(app)

    return app


def _configure_app(app: Flask, config_name: str | None, core_config: Config | None) -> None:
    """Configure the Flask application."""
    # Determine configuration
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "development")

    # Base configuration
    app.config["SECRET_KEY"] = os.getenv("FLASK_SECRET_KEY", "dev-secret-key-change-in-production")
    app.config["FESTIVAL_CONFIG"] = core_config or load_config()
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    # Environment-specific configuration
    if config_name == "development":
        app.config["DEBUG"] = True
    elif config_name == "testing":
        app.config["TESTING"] = True
    elif config_name == "production":
        app.config["DEBUG"] = False
        # In production, SECRET_KEY must be set via environment
        if app.config["SECRET_KEY"] == "dev-secret-key-change-in-production":
            raise ValueError("FLASK_SECRET_KEY must be set in production!")

    app.config["PROJECT_ROOT"] = PROJECT_ROOT


def _register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    from festival_api.routes.api import api_bp

    app.register_blueprint(api_bp)


def _register_cli_commands(app: Flask) -> None:
    """Register Flask CLI commands."""
    from festival_api.commands import register_commands
    register_commands(app)
