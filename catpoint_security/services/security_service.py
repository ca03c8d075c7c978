"""Alarm decision engine.

Receives sensor activity, camera frames and arming changes, forwards state
to the sensor store, decides the alarm status and tells listeners about it.

Priority between the signals:

* While ALARM is raised, sensor changes never move the alarm status; only
  disarming clears it.
* A cat seen while armed-home raises ALARM immediately, whatever the sensors
  say, both when the frame arrives and when the system is armed later.
* Sensors escalate NO_ALARM -> PENDING_ALARM -> ALARM while armed, and a
  sensor going inactive drops PENDING_ALARM back to NO_ALARM.
"""

import threading
from typing import Any, Dict, Optional, Set

from ..models.security import AlarmStatus, ArmingStatus, Sensor
from ..config.defaults import CAT_CONFIDENCE_THRESHOLD
from .interfaces import CatDetectorInterface, SecurityRepositoryInterface, StatusListener
from .listener_notifier import ListenerNotifier
from .error_decorators import log_execution_time
from ..logging_config import get_logger

logger = get_logger("security_service")

# Alarm status after a sensor activation while armed. ALARM is absent: it is
# filtered out before the rule runs.
SENSOR_ACTIVATED_TRANSITIONS: Dict[AlarmStatus, AlarmStatus] = {
    AlarmStatus.NO_ALARM: AlarmStatus.PENDING_ALARM,
    AlarmStatus.PENDING_ALARM: AlarmStatus.ALARM,
}

# Alarm status after an active sensor goes inactive.
SENSOR_DEACTIVATED_TRANSITIONS: Dict[AlarmStatus, AlarmStatus] = {
    AlarmStatus.PENDING_ALARM: AlarmStatus.NO_ALARM,
}


class SecurityService:
    """Owns the alarm and arming status and applies the transition rules.

    All public operations hold one re-entrant lock from reading state until
    the listeners have been notified.
    """

    def __init__(self,
                 repository: SecurityRepositoryInterface,
                 cat_detector: CatDetectorInterface,
                 notifier: Optional[ListenerNotifier] = None):
        self.repository = repository
        self.cat_detector = cat_detector
        self.notifier = notifier or ListenerNotifier()
        self._cat_detected = False
        self._lock = threading.RLock()

    # Listeners

    def add_status_listener(self, listener: StatusListener) -> None:
        self.notifier.register(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        self.notifier.unregister(listener)

    # Queries

    def get_alarm_status(self) -> AlarmStatus:
        with self._lock:
            return self.repository.get_alarm_status()

    def get_arming_status(self) -> ArmingStatus:
        with self._lock:
            return self.repository.get_arming_status()

    def get_sensors(self) -> Set[Sensor]:
        with self._lock:
            return self.repository.get_sensors()

    def is_cat_detected(self) -> bool:
        with self._lock:
            return self._cat_detected

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of the whole system state."""
        with self._lock:
            alarm_status = self.get_alarm_status()
            arming_status = self.get_arming_status()
            return {
                "alarm_status": alarm_status.name,
                "alarm_description": alarm_status.description,
                "arming_status": arming_status.name,
                "arming_description": arming_status.description,
                "cat_detected": self._cat_detected,
                "sensors": [sensor.to_dict() for sensor in sorted(self.get_sensors())]
            }

    # Sensor management

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self.repository.add_sensor(sensor)
            logger.info(f"Sensor added: {sensor.name} ({sensor.sensor_type.name})")
            self.notifier.notify_sensor_status_changed()

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self.repository.remove_sensor(sensor)
            logger.info(f"Sensor removed: {sensor.name} ({sensor.sensor_type.name})")
            self.notifier.notify_sensor_status_changed()

    # Inputs

    def change_sensor_activation(self, sensor: Sensor, active: bool) -> None:
        """Record a sensor flip and update the alarm status if necessary."""
        with self._lock:
            was_active = self._tracked_flag(sensor)

            if self.get_alarm_status() != AlarmStatus.ALARM:
                if active:
                    self._handle_sensor_activated()
                elif was_active:
                    self._handle_sensor_deactivated()

            sensor.active = active
            self.repository.update_sensor(sensor)
            logger.debug(f"Sensor {sensor.name} set {'active' if active else 'inactive'}")

    @log_execution_time("security_service")
    def process_image(self, image: Any) -> None:
        """Run a camera frame through the cat detector and update the alarm status.

        Detector errors propagate to the caller; state is left untouched.
        """
        with self._lock:
            try:
                cat_present = bool(self.cat_detector.image_contains_cat(image, CAT_CONFIDENCE_THRESHOLD))
            except Exception as e:
                logger.error(f"Cat detector failed: {e}")
                raise
            self._cat_detected_changed(cat_present)

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """Change the arming mode; may clear or raise the alarm, or reset sensors."""
        with self._lock:
            if arming_status == ArmingStatus.DISARMED:
                self._set_alarm_status(AlarmStatus.NO_ALARM)
            elif self._cat_detected and arming_status == ArmingStatus.ARMED_HOME:
                self._set_alarm_status(AlarmStatus.ALARM)
            else:
                for sensor in sorted(self.get_sensors()):
                    self.change_sensor_activation(sensor, False)

            self.repository.set_arming_status(arming_status)
            logger.info(f"Arming status: {arming_status.name}")
            self.notifier.notify_sensor_status_changed()

    # Rules

    def _tracked_flag(self, sensor: Sensor) -> bool:
        for tracked in self.get_sensors():
            if tracked == sensor:
                return tracked.active
        return sensor.active

    def _handle_sensor_activated(self) -> None:
        if self.get_arming_status() == ArmingStatus.DISARMED:
            return
        next_status = SENSOR_ACTIVATED_TRANSITIONS.get(self.get_alarm_status())
        if next_status is not None:
            self._set_alarm_status(next_status)

    def _handle_sensor_deactivated(self) -> None:
        next_status = SENSOR_DEACTIVATED_TRANSITIONS.get(self.get_alarm_status())
        if next_status is not None:
            self._set_alarm_status(next_status)

    def _cat_detected_changed(self, cat_present: bool) -> None:
        sensor_activated = any(sensor.active for sensor in self.get_sensors())
        self._cat_detected = cat_present

        if cat_present and self.get_arming_status() == ArmingStatus.ARMED_HOME:
            self._set_alarm_status(AlarmStatus.ALARM)
        elif not cat_present and not sensor_activated:
            self._set_alarm_status(AlarmStatus.NO_ALARM)

        self.notifier.notify_cat_detected(cat_present)

    def _set_alarm_status(self, status: AlarmStatus) -> None:
        self.repository.set_alarm_status(status)
        logger.info(f"Alarm status set to {status.name}")
        self.notifier.notify_alarm_status(status)
