# src/salesportal/services/factory.py
"""
Service factory functions.
Builds the application's services and registers them with the container.
"""

import logging
from typing import Optional

from .container import get_container, ServiceContainer, ServiceCreationError
from ..config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_container_from_settings(settings: Settings) -> ServiceContainer:
    """Copy the settings the factories need into the container configuration."""
    container = get_container()
    container.set_config({
        "ENVIRONMENT": settings.environment,
        "PROJECT_ROOT": str(settings.project_root),
        "DB_PATH": settings.database.db_path,
        "AUTO_CREATE_SCHEMA": settings.database.auto_create_schema,
        "INCLUDE_DIAGNOSTICS": not settings.is_production,
        "INGESTION": settings.ingestion,
    })
    logger.info(f"Configured container for environment: {settings.environment}")
    return container


def create_database_connection(db_path: Optional[str] = None):
    """
    Create database connection, initializing the schema when configured to.

    Args:
        db_path: Optional database path override

    Returns:
        Configured DatabaseConnection instance
    """
    try:
        from ..database.connection import DatabaseConnection
        from ..database.schema import initialize_schema

        container = get_container()
        if db_path is None:
            db_path = container.get_config("DB_PATH")
        if not db_path:
            raise ServiceCreationError("No database path configured")

        logger.info(f"Creating database connection to: {db_path}")
        db = DatabaseConnection(db_path)

        if container.get_config("AUTO_CREATE_SCHEMA", True):
            with db.connection() as conn:
                initialize_schema(conn)

        return db

    except ServiceCreationError:
        raise
    except Exception as e:
        logger.error(f"Failed to create database connection: {e}")
        raise ServiceCreationError(f"Database connection creation failed: {e}") from e


def create_operation_log_service():
    """Create OperationLogService."""
    try:
        from .operation_log_service import OperationLogService

        container = get_container()
        ingestion = container.get_config("INGESTION")
        default_user = ingestion.log_user_default if ingestion else "unknown@unknown.com"

        return OperationLogService(container.get("database_connection"), default_user=default_user)

    except Exception as e:
        logger.error(f"Failed to create operation log service: {e}")
        raise ServiceCreationError(f"Operation log service creation failed: {e}") from e


def create_campaign_ingestion_service():
    """Create CampaignIngestionService wired to the operation log."""
    try:
        from .campaign_ingestion_service import CampaignIngestionService

        container = get_container()
        return CampaignIngestionService(
            container.get("database_connection"),
            container.get("operation_log_service"),
            config=container.get_config("INGESTION"),
            include_diagnostics=container.get_config("INCLUDE_DIAGNOSTICS", False),
        )

    except Exception as e:
        logger.error(f"Failed to create campaign ingestion service: {e}")
        raise ServiceCreationError(f"Campaign ingestion service creation failed: {e}") from e


def create_campaign_report_service():
    """Create CampaignReportService."""
    try:
        from .campaign_report_service import CampaignReportService

        return CampaignReportService(get_container().get("database_connection"))

    except Exception as e:
        logger.error(f"Failed to create campaign report service: {e}")
        raise ServiceCreationError(f"Campaign report service creation failed: {e}") from e


def initialize_services(settings: Optional[Settings] = None) -> ServiceContainer:
    """Register every service with the global container."""
    settings = settings or get_settings()
    container = configure_container_from_settings(settings)

    container.register_singleton("database_connection", create_database_connection)
    container.register_singleton("operation_log_service", create_operation_log_service)
    container.register_singleton("campaign_ingestion_service", create_campaign_ingestion_service)
    container.register_singleton("campaign_report_service", create_campaign_report_service)

    logger.debug(f"Registered services: {container.list_services()}")
    return container
