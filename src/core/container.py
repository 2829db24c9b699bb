#!/usr/bin/env python3
"""
Dependency Injection Container

Wires configuration, storage, history, session results and PageSpeed
clients together so commands and tests can swap any of them.
"""

import logging
from typing import Any, Dict, Callable, TypeVar, Optional, Set
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with singleton and factory services."""

    def __init__(self):
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._singleton_names: Set[str] = set()
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a factory whose first result is cached and reused."""
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.add(service_name)
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a factory called on every get()."""
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.discard(service_name)
            self._singletons.pop(service_name, None)

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register a pre-built instance, e.g. a test double."""
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        with self._lock:
            factory = self._factories[service_name]

            if service_name in self._singleton_names:
                if service_name not in self._singletons:
                    self._singletons[service_name] = factory()
                    logger.debug(f"Created singleton instance for '{service_name}'")
                return self._singletons[service_name]

            logger.debug(f"Created new instance for '{service_name}'")
            return factory()

    def has(self, service_name: str) -> bool:
        return service_name in self._factories or service_name in self._singletons

    def clear(self) -> None:
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_names.clear()


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def setup_default_services(container: Container) -> None:
    """Register default services; each one reads the 'config' service lazily."""

    def create_config():
        from core.config import get_config
        return get_config()

    def create_storage():
        from core.storage import FileStorage
        return FileStorage(container.get('config').storage.storage_dir)

    def create_history_store():
        from core.history_store import HistoryStore
        config = container.get('config')
        return HistoryStore(
            container.get('storage'),
            key=config.storage.history_key,
            max_entries=config.storage.max_history
        )

    def create_session_results():
        from core.session import SessionResultList
        return SessionResultList()

    def create_pagespeed_client():
        from integrations.pagespeed_client import PageSpeedClient
        config = container.get('config')
        return PageSpeedClient(
            api_url=config.provider.api_url,
            api_key=config.provider.api_key,
            timeout=config.provider.timeout
        )

    def create_async_pagespeed_client():
        from integrations.pagespeed_client import AsyncPageSpeedClient
        config = container.get('config')
        return AsyncPageSpeedClient(
            api_url=config.provider.api_url,
            api_key=config.provider.api_key,
            timeout=config.provider.timeout,
            max_concurrent=config.provider.max_concurrent
        )

    def create_analyzer():
        from core.analyzer import PageAnalyzer
        return PageAnalyzer(
            client=container.get('pagespeed_client'),
            history_store=container.get('history_store'),
            session_results=container.get('session_results'),
            async_client_factory=lambda: container.get('async_pagespeed_client')
        )

    container.register_singleton('config', create_config)
    container.register_singleton('storage', create_storage)
    container.register_singleton('history_store', create_history_store)
    container.register_singleton('session_results', create_session_results)
    container.register_singleton('pagespeed_client', create_pagespeed_client)
    container.register_singleton('analyzer', create_analyzer)

    # A fresh async client per batch, since its session lives in one event loop
    container.register_factory('async_pagespeed_client', create_async_pagespeed_client)

    logger.debug("Default services registered in container")
