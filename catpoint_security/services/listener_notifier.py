"""Fan-out of security state changes to registered listeners."""

import threading
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional, Set

from ..models.security import AlarmStatus
from .interfaces import StatusListener
from .error_handler import ErrorHandler, ErrorSeverity, global_error_handler
from ..utils import format_timestamp
from ..logging_config import get_logger

logger = get_logger("listener_notifier")

COMPONENT_NAME = "status_listeners"


class ListenerNotifier:
    """Synchronous broadcaster over a set of status listeners.

    Each broadcast iterates a snapshot of the listener set taken when the
    broadcast starts, so listeners registered or removed from inside a hook
    only see (or stop seeing) the next broadcast. A listener that raises is
    recorded with the error handler and the rest are still notified.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None):
        self._listeners: Set[StatusListener] = set()
        self._lock = threading.Lock()
        self.error_handler = error_handler or global_error_handler
        self.error_handler.register_component(COMPONENT_NAME)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def register(self, listener: StatusListener) -> None:
        with self._lock:
            self._listeners.add(listener)
        logger.debug(f"Listener registered: {listener!r}")

    def unregister(self, listener: StatusListener) -> None:
        with self._lock:
            self._listeners.discard(listener)
        logger.debug(f"Listener unregistered: {listener!r}")

    def notify_alarm_status(self, status: AlarmStatus) -> None:
        self._broadcast("alarm_status", lambda listener: listener.on_alarm_status_changed(status))

    def notify_cat_detected(self, cat_detected: bool) -> None:
        self._broadcast("cat_detected", lambda listener: listener.on_cat_detected(cat_detected))

    def notify_sensor_status_changed(self) -> None:
        self._broadcast("sensor_status", lambda listener: listener.on_sensor_status_changed())

    def _broadcast(self, event: str, deliver: Callable[[StatusListener], None]) -> None:
        with self._lock:
            snapshot: List[StatusListener] = list(self._listeners)

        for listener in snapshot:
            try:
                deliver(listener)
            except Exception as e:
                logger.warning(f"Listener {listener!r} failed on {event} event")
                self.error_handler.handle_error(COMPONENT_NAME, e, ErrorSeverity.LOW)


class LoggingStatusListener(StatusListener):
    """Writes every state change to the log."""

    def __init__(self):
        self.logger = get_logger("status")

    def on_alarm_status_changed(self, status: AlarmStatus) -> None:
        self.logger.info(f"Alarm status: {status.name} ({status.description})")

    def on_cat_detected(self, cat_detected: bool) -> None:
        self.logger.info("Cat detected in camera frame" if cat_detected
                         else "No cat in camera frame")

    def on_sensor_status_changed(self) -> None:
        self.logger.debug("Sensor or arming status changed")


class EventLogListener(StatusListener):
    """Keeps the most recent state change events in memory."""

    def __init__(self, max_events: int = 100):
        self._events: Deque[Dict[str, Any]] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def _record(self, kind: str, value: Any) -> None:
        with self._lock:
            self._events.append({
                "timestamp": format_timestamp(datetime.now()),
                "event": kind,
                "value": value
            })

    def on_alarm_status_changed(self, status: AlarmStatus) -> None:
        self._record("alarm_status", status.name)

    def on_cat_detected(self, cat_detected: bool) -> None:
        self._record("cat_detected", cat_detected)

    def on_sensor_status_changed(self) -> None:
        self._record("sensor_status", None)

    def get_events(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Recorded events, oldest first; ``limit`` keeps only the newest ones."""
        with self._lock:
            events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
