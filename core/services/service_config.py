#!/usr/bin/env python3
"""
Service configuration and registration
"""
import logging

from .service_registry import register_service, get_service
from .interfaces import IIncidentTimelineService

logger = logging.getLogger("incident_timeline.ServiceConfiguration")


def configure_services():
    """Configure and register all application services"""
    try:
        from incident_timeline.services.incident_timeline_service import IncidentTimelineService
        register_service(IIncidentTimelineService, IncidentTimelineService())
        logger.info("All services configured successfully")

    except Exception as e:
        logger.error(f"Service configuration failed: {e}")
        raise


def get_configured_services():
    """Get list of all configured service interfaces for debugging"""
    return [IIncidentTimelineService]


def verify_service_configuration():
    """Verify all services are properly configured (for testing/debugging)"""
    results = {}

    for service_interface in get_configured_services():
        try:
            service = get_service(service_interface)
            results[service_interface.__name__] = {
                'configured': True,
                'instance': service.__class__.__name__,
                'error': None
            }
        except ValueError as e:
            results[service_interface.__name__] = {
                'configured': False,
                'instance': None,
                'error': str(e)
            }

    return results
