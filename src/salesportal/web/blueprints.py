# src/salesportal/web/blueprints.py
"""
Blueprint registration.
"""
import logging
from typing import Dict, Any

from flask import Flask

from .routes.health import health_bp
from .routes.tiktok import tiktok_bp

logger = logging.getLogger(__name__)

BLUEPRINTS = (
    (tiktok_bp, "TikTok campaign API"),
    (health_bp, "health monitoring"),
)


def register_blueprints(app: Flask) -> None:
    try:
        for blueprint, label in BLUEPRINTS:
            app.register_blueprint(blueprint)
            logger.info(f"Registered {label} blueprint")

        logger.info("All blueprints registered successfully")
    except Exception as e:
        logger.error(f"Error registering blueprints: {e}")
        raise


def get_blueprint_info() -> Dict[str, Any]:
    """Name and URL prefix of every registered blueprint."""
    return {
        blueprint.name: {"url_prefix": blueprint.url_prefix, "description": label}
        for blueprint, label in BLUEPRINTS
    }
