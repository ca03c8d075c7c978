"""Service interfaces and abstract base classes."""

from abc import ABC, abstractmethod
from typing import Set

import numpy as np

from ..models.security import AlarmStatus, ArmingStatus, Sensor

NDArray = np.ndarray


class SecurityRepositoryInterface(ABC):
    """Storage for sensors and the two system status slots."""

    @abstractmethod
    def add_sensor(self, sensor: Sensor) -> None:
        """Start tracking a sensor."""
        pass

    @abstractmethod
    def remove_sensor(self, sensor: Sensor) -> None:
        """Stop tracking a sensor."""
        pass

    @abstractmethod
    def update_sensor(self, sensor: Sensor) -> None:
        """Store the sensor's current state, tracking it if needed."""
        pass

    @abstractmethod
    def get_sensors(self) -> Set[Sensor]:
        """Get all tracked sensors."""
        pass

    @abstractmethod
    def get_alarm_status(self) -> AlarmStatus:
        pass

    @abstractmethod
    def set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        pass

    @abstractmethod
    def get_arming_status(self) -> ArmingStatus:
        pass

    @abstractmethod
    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        pass


class CatDetectorInterface(ABC):
    """Interface for camera frame cat classification."""

    @abstractmethod
    def image_contains_cat(self, image: NDArray, confidence_threshold: float) -> bool:
        """Return True if the image shows a cat with at least the given confidence (percent)."""
        pass


class StatusListener(ABC):
    """Observer of security system state changes."""

    @abstractmethod
    def on_alarm_status_changed(self, status: AlarmStatus) -> None:
        """Called whenever the alarm status is written."""
        pass

    @abstractmethod
    def on_cat_detected(self, cat_detected: bool) -> None:
        """Called with the result of every processed camera frame."""
        pass

    @abstractmethod
    def on_sensor_status_changed(self) -> None:
        """Called when sensors or the arming status changed; re-query state."""
        pass
