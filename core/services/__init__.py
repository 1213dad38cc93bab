#!/usr/bin/env python3
"""
Service layer for the Incident Timeline application

This package provides:
- Dependency injection through service registry
- Separation of business logic from presentation
- Testable, mockable service interfaces
"""

from .service_registry import (
    ServiceRegistry, get_service, register_service, register_factory,
    is_registered, clear_services
)
from .interfaces import IService, IIncidentTimelineService
from .base_service import BaseService

# Service configuration
from .service_config import configure_services, verify_service_configuration

__all__ = [
    'ServiceRegistry', 'get_service', 'register_service', 'register_factory',
    'is_registered', 'clear_services',
    'IService', 'IIncidentTimelineService',
    'BaseService',
    'configure_services', 'verify_service_configuration'
]
