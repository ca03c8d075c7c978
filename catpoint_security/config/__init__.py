"""Configuration components for the security system."""

from .defaults import (
    CAT_CONFIDENCE_THRESHOLD,
    SYSTEM_CONSTANTS,
    DEFAULT_PATHS,
    DETECTOR_SETTINGS
)

__all__ = [
    'CAT_CONFIDENCE_THRESHOLD',
    'SYSTEM_CONSTANTS',
    'DEFAULT_PATHS',
    'DETECTOR_SETTINGS'
]
