"""In-memory sensor store."""

import threading
from typing import Dict, Set

from ..models.security import AlarmStatus, ArmingStatus, Sensor
from .interfaces import SecurityRepositoryInterface
from ..logging_config import get_logger

logger = get_logger("repository")


class InMemorySecurityRepository(SecurityRepositoryInterface):
    """Sensor store that lives for the lifetime of the process."""

    def __init__(self,
                 alarm_status: AlarmStatus = AlarmStatus.NO_ALARM,
                 arming_status: ArmingStatus = ArmingStatus.DISARMED):
        self._sensors: Dict[tuple, Sensor] = {}
        self._alarm_status = alarm_status
        self._arming_status = arming_status
        self._lock = threading.Lock()

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors[sensor.key] = sensor
        logger.debug(f"Sensor added: {sensor.name} ({sensor.sensor_type.name})")

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            removed = self._sensors.pop(sensor.key, None)
        if removed is not None:
            logger.debug(f"Sensor removed: {sensor.name} ({sensor.sensor_type.name})")

    def update_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors[sensor.key] = sensor

    def get_sensors(self) -> Set[Sensor]:
        with self._lock:
            return set(self._sensors.values())

    def get_alarm_status(self) -> AlarmStatus:
        return self._alarm_status

    def set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        self._alarm_status = alarm_status

    def get_arming_status(self) -> ArmingStatus:
        return self._arming_status

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        self._arming_status = arming_status
