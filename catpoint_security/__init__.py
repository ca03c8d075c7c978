"""
Catpoint Security

Alarm decision logic for a home security controller: door, window and
motion sensors, an arming mode and a camera-based cat detector feed one
engine that decides the alarm status and notifies listeners.
"""

__version__ = "1.0.0"

from .config_manager import ConfigManager
from .models import (
    AlarmStatus,
    ArmingStatus,
    Sensor,
    SensorType,
    SecurityConfig
)
from .services import (
    SecurityRepositoryInterface,
    CatDetectorInterface,
    StatusListener,
    InMemorySecurityRepository,
    SQLiteSecurityRepository,
    ListenerNotifier,
    SecurityService
)

__all__ = [
    # Core management
    'ConfigManager',
    'SecurityService',

    # Data models
    'AlarmStatus',
    'ArmingStatus',
    'Sensor',
    'SensorType',
    'SecurityConfig',

    # Service interfaces
    'SecurityRepositoryInterface',
    'CatDetectorInterface',
    'StatusListener',

    # Implementations
    'InMemorySecurityRepository',
    'SQLiteSecurityRepository',
    'ListenerNotifier'
]
