# src/salesportal/web/app.py
"""
Flask application factory with dependency injection.
Route handlers live in blueprints; this module wires configuration,
services and error handlers together.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .. import __version__
from ..config.settings import get_settings
from ..services.container import ServiceCreationError
from ..services.factory import initialize_services
from .blueprints import register_blueprints, get_blueprint_info

logger = logging.getLogger(__name__)


def create_app(environment: Optional[str] = None) -> Flask:
    settings = get_settings(environment)

    try:
        container = initialize_services(settings)
        # Build the database eagerly so schema problems fail at startup
        container.get("database_connection")
        logger.info("Service container initialized successfully")
    except ServiceCreationError as e:
        logger.error(f"Failed to initialize services: {e}")
        raise

    app = Flask(__name__)

    app.config.update({
        'SECRET_KEY': settings.web.secret_key,
        'DEBUG': settings.web.debug,
        'TESTING': settings.environment == 'test',
        'MAX_CONTENT_LENGTH': settings.web.max_content_length,
        'ENVIRONMENT': settings.environment,
        'PROJECT_ROOT': str(settings.project_root),
        'DB_PATH': settings.database.db_path,
    })

    register_blueprints(app)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        """Answer framework-level errors (404, 405, 413) in the API's JSON shape."""
        response = jsonify({
            'success': False,
            'error': error.name,
            'message': error.description,
        })
        response.status_code = error.code or 500
        return response

    @app.route('/info')
    def app_info():
        """Application information endpoint."""
        return jsonify({
            'app_name': 'Sales Portal',
            'version': __version__,
            'environment': settings.environment,
            'debug': settings.web.debug,
            'blueprints': get_blueprint_info(),
        })

    logger.info(f"Flask app created for environment: {settings.environment}")
    return app


def create_wsgi_app() -> Flask:
    """Create WSGI application for production deployment."""
    return create_app('production')


def create_development_app() -> Flask:
    """Create development application with debug features."""
    return create_app('development')


def create_testing_app() -> Flask:
    """Create testing application with test configuration."""
    return create_app('testing')


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    app = create_development_app()
    settings = get_settings('development')

    logger.info(f"Starting development server on {settings.web.host}:{settings.web.port}")
    app.run(
        debug=settings.web.debug,
        host=settings.web.host,
        port=settings.web.port,
    )
