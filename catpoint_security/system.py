"""Wiring of sensor store, cat detector and decision engine from configuration."""

from typing import Optional

from .models.config import SecurityConfig
from .exceptions import ConfigurationError
from .services.interfaces import CatDetectorInterface, SecurityRepositoryInterface
from .services.repository import InMemorySecurityRepository
from .services.sqlite_repository import SQLiteSecurityRepository
from .services.cat_detector import create_cat_detector
from .services.listener_notifier import ListenerNotifier, LoggingStatusListener
from .services.security_service import SecurityService
from .logging_config import get_logger

logger = get_logger("system")


def create_repository(config: SecurityConfig) -> SecurityRepositoryInterface:
    """Build the sensor store selected in the configuration."""
    if config.repository == "memory":
        return InMemorySecurityRepository()
    if config.repository == "sqlite":
        return SQLiteSecurityRepository(config.database_path)
    raise ConfigurationError(f"Unknown repository: {config.repository}")


def build_security_service(config: SecurityConfig,
                           cat_detector: Optional[CatDetectorInterface] = None,
                           notifier: Optional[ListenerNotifier] = None) -> SecurityService:
    """Create a ready-to-use SecurityService with a logging listener attached."""
    repository = create_repository(config)
    detector = cat_detector or create_cat_detector(config)

    service = SecurityService(repository, detector, notifier)
    service.add_status_listener(LoggingStatusListener())

    logger.info(f"Security service ready (repository={config.repository}, "
                f"detector={type(detector).__name__})")
    return service
