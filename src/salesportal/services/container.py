"""
Service Container for dependency injection and service management.
Services are registered by name as lazily-built singletons, per-call
factories, or ready instances, and resolved with ``get``.
"""
from typing import Dict, Any, Callable, TypeVar, Optional
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ServiceNotFoundError(Exception):
    """Raised when a requested service is not found in the container."""
    pass


class ServiceCreationError(Exception):
    """Raised when service creation fails."""
    pass


class ServiceContainer:
    """Name-keyed registry of the application's services and configuration."""

    def __init__(self):
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._singleton_factories: Dict[str, Callable[[], Any]] = {}
        self._singletons: Dict[str, Any] = {}
        self._config: Dict[str, Any] = {}

    def register_singleton(self, name: str, factory: Callable[[], T]) -> None:
        """Register a service built on first use and reused afterwards."""
        self._singleton_factories[name] = factory
        self._singletons.pop(name, None)
        logger.debug(f"Registered singleton service: {name}")

    def register_factory(self, name: str, factory: Callable[[], T]) -> None:
        """Register a service built fresh on every lookup."""
        self._factories[name] = factory
        logger.debug(f"Registered factory service: {name}")

    def register_instance(self, name: str, instance: T) -> None:
        """Register a pre-created service instance."""
        self._singletons[name] = instance
        logger.debug(f"Registered service instance: {name}")

    def set_config(self, config: Dict[str, Any]) -> None:
        self._config = dict(config)
        logger.debug(f"Updated container configuration with {len(config)} items")

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get(self, name: str) -> Any:
        """
        Resolve and return a service instance.

        Raises:
            ServiceNotFoundError: If service is not registered
            ServiceCreationError: If the service factory fails
        """
        if name in self._singletons:
            return self._singletons[name]

        if name in self._singleton_factories:
            instance = self._build(name, self._singleton_factories[name], "singleton")
            self._singletons[name] = instance
            return instance

        if name in self._factories:
            return self._build(name, self._factories[name], "factory")

        raise ServiceNotFoundError(f"Service '{name}' not found in container")

    def _build(self, name: str, factory: Callable[[], Any], kind: str) -> Any:
        logger.debug(f"Creating {kind} service: {name}")
        try:
            return factory()
        except ServiceCreationError:
            raise
        except Exception as e:
            logger.error(f"Failed to create {kind} service '{name}': {e}")
            raise ServiceCreationError(f"Failed to create {kind} service '{name}': {e}") from e

    def has_service(self, name: str) -> bool:
        return (name in self._factories or
                name in self._singleton_factories or
                name in self._singletons)

    def clear_singletons(self) -> None:
        """Drop built singletons so the next lookup rebuilds them."""
        self._singletons.clear()
        logger.debug("Cleared all singleton instances")

    def list_services(self) -> Dict[str, str]:
        """List all registered services and how they are provided."""
        services = {}
        for name in self._singleton_factories:
            services[name] = "singleton"
        for name in self._factories:
            services[name] = "factory"
        for name in self._singletons:
            services.setdefault(name, "instance")
        return services


# Global container instance
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global service container instance."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    _container = None
