"""Security system data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class AlarmStatus(Enum):
    """Current alert level of the system."""
    NO_ALARM = "Cool and Good"
    PENDING_ALARM = "I'm in Danger..."
    ALARM = "Awooga!"

    @property
    def description(self) -> str:
        return self.value


class ArmingStatus(Enum):
    """Operating mode of the system."""
    DISARMED = "Disarmed"
    ARMED_HOME = "Armed - At Home"
    ARMED_AWAY = "Armed - Away"

    @property
    def description(self) -> str:
        return self.value


class SensorType(Enum):
    """Category of a sensor."""
    DOOR = "door"
    WINDOW = "window"
    MOTION = "motion"


@dataclass(eq=False)
class Sensor:
    """A binary contact or presence detector.

    Two sensors are the same sensor when they share name and type; the
    active flag is state, not identity.
    """
    name: str
    sensor_type: SensorType
    active: bool = False

    @property
    def key(self) -> tuple:
        return (self.name, self.sensor_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sensor):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __lt__(self, other: "Sensor") -> bool:
        return (self.name, self.sensor_type.value) < (other.name, other.sensor_type.value)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the JSON API."""
        return {
            "name": self.name,
            "sensor_type": self.sensor_type.name,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sensor":
        """Build a sensor from API input; raises KeyError/ValueError on bad input."""
        name = str(data["name"]).strip()
        if not name:
            raise ValueError("Sensor name must not be empty")
        return cls(
            name=name,
            sensor_type=SensorType[str(data["sensor_type"]).upper()],
            active=bool(data.get("active", False)),
        )
