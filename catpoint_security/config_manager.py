"""Configuration management with JSON file persistence."""

import json
import os
from dataclasses import asdict, fields
from typing import Optional, Dict, Any, Callable, List

from .models.config import SecurityConfig
from .config.defaults import DEFAULT_PATHS, VALID_DETECTORS, VALID_REPOSITORIES
from .exceptions import ConfigurationError
from .logging_config import get_logger

logger = get_logger("config_manager")


class ConfigManager:
    """Manages system configuration with file persistence and change callbacks."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_PATHS["config_file"]
        self._config: Optional[SecurityConfig] = None
        self._config_change_callbacks: List[Callable[[SecurityConfig], None]] = []

        self.load_config()

    def load_config(self) -> SecurityConfig:
        """Load configuration from file or create default."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_dict = json.load(f)
                self._config = SecurityConfig(**self._known_keys(config_dict))
            except (json.JSONDecodeError, TypeError) as e:
                logger.error(f"Error loading config: {e}. Using defaults.")
                self._config = SecurityConfig()
        else:
            self._config = SecurityConfig()
            self.save_config()

        return self._config

    @staticmethod
    def _known_keys(config_dict: Dict[str, Any]) -> Dict[str, Any]:
        known = {f.name for f in fields(SecurityConfig)}
        unknown = set(config_dict) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return {k: v for k, v in config_dict.items() if k in known}

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(asdict(self._config), f, indent=2)

    def get_config(self) -> SecurityConfig:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values.

        Raises:
            ConfigurationError: if the resulting configuration is invalid;
                the previous configuration is kept.
        """
        config = self.get_config()
        previous = asdict(config)

        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config key ignored: {key}")

        if not self.validate_config():
            self._config = SecurityConfig(**previous)
            raise ConfigurationError(f"Invalid configuration update: {kwargs}")

        self.save_config()

        for callback in self._config_change_callbacks:
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    def validate_config(self) -> bool:
        """Validate current configuration."""
        if self._config is None:
            return False

        if self._config.repository not in VALID_REPOSITORIES:
            return False

        if self._config.detector not in VALID_DETECTORS:
            return False

        if self._config.repository == "sqlite" and not self._config.database_path:
            return False

        if self._config.min_detection_size < 10:
            return False

        if not (1 <= self._config.web_port <= 65535):
            return False

        if self._config.event_log_size < 1:
            return False

        if self._config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return False

        return True

    def register_change_callback(self, callback: Callable[[SecurityConfig], None]) -> None:
        """Register a callback invoked after every successful update."""
        self._config_change_callbacks.append(callback)

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults and save."""
        self._config = SecurityConfig()
        self.save_config()
        logger.info("Configuration reset to defaults")
