"""
Service layer: dependency container, ingestion pipeline and reporting.
"""

from .container import (
    ServiceContainer,
    ServiceNotFoundError,
    ServiceCreationError,
    get_container,
    reset_container,
)

__all__ = [
    'ServiceContainer',
    'ServiceNotFoundError',
    'ServiceCreationError',
    'get_container',
    'reset_container',
]
