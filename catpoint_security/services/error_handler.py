"""Error recording for components that must keep running after a failure."""

import traceback
from datetime import datetime
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum
import threading

from ..logging_config import get_logger

logger = get_logger("error_handler")


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ComponentStatus(Enum):
    """Component status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass
class ErrorRecord:
    """Record of an error occurrence."""
    component_name: str
    error: Exception
    severity: ErrorSeverity
    timestamp: datetime = field(default_factory=datetime.now)
    traceback_str: str = ""


class ErrorHandler:
    """Keeps per-component error counts, status and a bounded error history."""

    def __init__(self, max_records: int = 500):
        self.max_records = max_records
        self.error_records: List[ErrorRecord] = []
        self.component_error_counts: Dict[str, int] = {}
        self.component_status: Dict[str, ComponentStatus] = {}
        self._lock = threading.Lock()

    def register_component(self, component_name: str) -> None:
        """Register a component for error tracking."""
        with self._lock:
            self.component_error_counts.setdefault(component_name, 0)
            self.component_status.setdefault(component_name, ComponentStatus.HEALTHY)
        logger.debug(f"Component registered: {component_name}")

    def handle_error(self, component_name: str, error: Exception,
                     severity: ErrorSeverity = ErrorSeverity.MEDIUM) -> ErrorRecord:
        """Record an error from a component and log it."""
        record = ErrorRecord(
            component_name=component_name,
            error=error,
            severity=severity,
            traceback_str=traceback.format_exc()
        )

        with self._lock:
            self.error_records.append(record)
            if len(self.error_records) > self.max_records:
                self.error_records = self.error_records[-self.max_records:]

            self.component_error_counts[component_name] = \
                self.component_error_counts.get(component_name, 0) + 1

            if severity == ErrorSeverity.CRITICAL:
                self.component_status[component_name] = ComponentStatus.FAILED
            elif severity == ErrorSeverity.HIGH:
                self.component_status[component_name] = ComponentStatus.DEGRADED
            else:
                self.component_status.setdefault(component_name, ComponentStatus.HEALTHY)

        logger.error(f"Error in {component_name}: {error} (Severity: {severity.value})")
        return record

    def get_component_status(self, component_name: str) -> ComponentStatus:
        return self.component_status.get(component_name, ComponentStatus.UNKNOWN)

    def get_error_count(self, component_name: str) -> int:
        return self.component_error_counts.get(component_name, 0)

    def get_recent_errors(self, component_name: Optional[str] = None,
                          limit: int = 10) -> List[ErrorRecord]:
        """Most recent errors, newest last."""
        with self._lock:
            records = [r for r in self.error_records
                       if component_name is None or r.component_name == component_name]
        return records[-limit:]

    def reset_component(self, component_name: str) -> None:
        """Clear error state for a component after it has recovered."""
        with self._lock:
            self.component_error_counts[component_name] = 0
            self.component_status[component_name] = ComponentStatus.HEALTHY
        logger.info(f"Error state reset for {component_name}")


# Global error handler instance
global_error_handler = ErrorHandler()
