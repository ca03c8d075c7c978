"""Configuration data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SecurityConfig:
    """System configuration settings."""
    # Sensor store
    repository: str = "memory"  # memory, sqlite
    database_path: str = "data/security.db"

    # Cat detection
    detector: str = "haar"  # haar, fake
    haar_cascade_path: Optional[str] = None
    min_detection_size: int = 30  # Minimum bounding box size in pixels

    # Web control panel
    web_host: str = "0.0.0.0"
    web_port: int = 5000
    event_log_size: int = 100

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
