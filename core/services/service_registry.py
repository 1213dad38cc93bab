#!/usr/bin/env python3
"""
Service registry with dependency injection

Controllers resolve services by interface so tests can register fakes.
"""
from typing import Callable, Dict, Type, TypeVar, Any
import threading

T = TypeVar('T')


class ServiceRegistry:
    """Thread-safe service registry with dependency injection"""

    def __init__(self):
        self._factories: Dict[Type, Callable[[], Any]] = {}
        self._singletons: Dict[Type, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, interface: Type[T], implementation: T):
        """Register singleton service instance"""
        with self._lock:
            self._singletons[interface] = implementation

    def register_factory(self, interface: Type[T], factory: Callable[[], T]):
        """Register service factory"""
        with self._lock:
            self._factories[interface] = factory

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return interface in self._singletons or interface in self._factories

    def get_service(self, interface: Type[T]) -> T:
        """Get service instance with dependency injection"""
        with self._lock:
            # Check singleton first
            if interface in self._singletons:
                return self._singletons[interface]

            if interface in self._factories:
                return self._factories[interface]()

            raise ValueError(f"Service {interface.__name__} not registered")

    def clear(self):
        """Clear all registrations (for testing)"""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()


# Global service registry
_service_registry = ServiceRegistry()


def get_service(interface: Type[T]) -> T:
    """Convenience function to get service"""
    return _service_registry.get_service(interface)


def register_service(interface: Type[T], implementation: T):
    """Convenience function to register singleton service"""
    _service_registry.register_singleton(interface, implementation)


def register_factory(interface: Type[T], factory: Callable[[], T]):
    """Convenience function to register service factory"""
    _service_registry.register_factory(interface, factory)


def is_registered(interface: Type) -> bool:
    return _service_registry.is_registered(interface)


def clear_services():
    """Drop every registration (test teardown)"""
    _service_registry.clear()
