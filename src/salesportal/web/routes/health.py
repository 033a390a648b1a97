# src/salesportal/web/routes/health.py
"""
Health check endpoint: service registration and database reachability.
"""

import logging
import sqlite3
from datetime import datetime, timezone

from flask import Blueprint

from ...services.container import get_container
from ..utils.request_helpers import (
    create_json_response,
    handle_request_errors,
    log_requests,
    safe_get_service,
)

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("/")
@log_requests
@handle_request_errors
def system_health():
    """Report registered services and whether the database answers."""
    container = get_container()
    services = container.list_services()

    database_ok = False
    try:
        db = safe_get_service(container, "database_connection")
        with db.connection() as conn:
            conn.execute("SELECT 1 FROM campaign_performance LIMIT 1").fetchall()
        database_ok = True
    except sqlite3.Error as e:
        logger.error(f"Health check database query failed: {e}")

    status = "healthy" if database_ok else "unhealthy"
    return create_json_response(
        {
            "status": status,
            "environment": container.get_config("ENVIRONMENT"),
            "services_count": len(services),
            "database_connected": database_ok,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        200 if database_ok else 503,
    )
