"""Services for the security system."""

from .interfaces import (
    SecurityRepositoryInterface,
    CatDetectorInterface,
    StatusListener
)
from .repository import InMemorySecurityRepository
from .sqlite_repository import SQLiteSecurityRepository
from .cat_detector import HaarCascadeCatDetector, FakeCatDetector, create_cat_detector
from .listener_notifier import ListenerNotifier, LoggingStatusListener, EventLogListener
from .security_service import SecurityService

__all__ = [
    'SecurityRepositoryInterface',
    'CatDetectorInterface',
    'StatusListener',
    'InMemorySecurityRepository',
    'SQLiteSecurityRepository',
    'HaarCascadeCatDetector',
    'FakeCatDetector',
    'create_cat_detector',
    'ListenerNotifier',
    'LoggingStatusListener',
    'EventLogListener',
    'SecurityService'
]
