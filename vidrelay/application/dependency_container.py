"""
Dependency Injection Container

Holds the services wired by the app factory so API handlers, websocket
handlers and Celery tasks resolve the same instances, and runs the
shutdown hooks of services that own threads.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Registry of process-wide service instances, keyed by type.

    Thread-safe. Shutdown hooks run once, most recently added first.
    """

    def __init__(self):
        self._services: Dict[Type, Any] = {}
        self._shutdown_hooks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register the instance returned for interface.

        Example:
            container.register_singleton(UploadCoordinator, coordinator)
        """
        with self._lock:
            self._services[interface] = implementation
        logger.debug(f"Registered {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Raises:
            DependencyNotFoundError: If the interface is not registered
        """
        with self._lock:
            try:
                return self._services[interface]
            except KeyError:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                ) from None

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return interface in self._services

    def add_shutdown_hook(self, hook: Callable[[], None]) -> None:
        """Run hook when the container shuts down."""
        with self._lock:
            self._shutdown_hooks.append(hook)

    def shutdown(self) -> None:
        """
        Run and clear the shutdown hooks.

        A failing hook is logged and the remaining hooks still run.
        """
        with self._lock:
            hooks = list(reversed(self._shutdown_hooks))
            self._shutdown_hooks.clear()

        for hook in hooks:
            try:
                hook()
            except Exception as e:
                logger.error(f"Shutdown hook {hook!r} failed: {e}", exc_info=True)
