"""SQLite-backed sensor store that survives restarts."""

import os
import sqlite3
from typing import Set

from ..models.security import AlarmStatus, ArmingStatus, Sensor, SensorType
from .interfaces import SecurityRepositoryInterface
from ..utils import ensure_directory_exists
from ..logging_config import get_logger

logger = get_logger("sqlite_repository")

ALARM_STATUS_KEY = "alarm_status"
ARMING_STATUS_KEY = "arming_status"


class SQLiteSecurityRepository(SecurityRepositoryInterface):
    """Sensor store persisted to an SQLite database file."""

    def __init__(self, database_path: str = "data/security.db"):
        """
        Initialize the store.

        Args:
            database_path: Path to SQLite database file; parent directories are created
        """
        self.database_path = database_path
        self._initialize_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.database_path)

    def _initialize_database(self) -> None:
        """Create tables and seed default statuses."""
        directory = os.path.dirname(self.database_path)
        if directory:
            ensure_directory_exists(directory)

        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS sensors (
                        name TEXT NOT NULL,
                        sensor_type TEXT NOT NULL,
                        active INTEGER NOT NULL DEFAULT 0,
                        PRIMARY KEY (name, sensor_type)
                    )
                """)

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS system_state (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                """)

                cursor.executemany(
                    "INSERT OR IGNORE INTO system_state (key, value) VALUES (?, ?)",
                    [(ALARM_STATUS_KEY, AlarmStatus.NO_ALARM.name),
                     (ARMING_STATUS_KEY, ArmingStatus.DISARMED.name)]
                )
                conn.commit()
                logger.debug("Database initialized successfully")

        except sqlite3.Error as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

        logger.info(f"Sensor store initialized: {self.database_path}")

    def add_sensor(self, sensor: Sensor) -> None:
        self.update_sensor(sensor)

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM sensors WHERE name = ? AND sensor_type = ?",
                (sensor.name, sensor.sensor_type.name)
            )
            conn.commit()

    def update_sensor(self, sensor: Sensor) -> None:
        with self._connect() as conn:
            conn.execute("""
                INSERT INTO sensors (name, sensor_type, active) VALUES (?, ?, ?)
                ON CONFLICT(name, sensor_type) DO UPDATE SET active = excluded.active
            """, (sensor.name, sensor.sensor_type.name, int(sensor.active)))
            conn.commit()

    def get_sensors(self) -> Set[Sensor]:
        with self._connect() as conn:
            rows = conn.execute("SELECT name, sensor_type, active FROM sensors").fetchall()

        sensors = set()
        for name, sensor_type, active in rows:
            try:
                sensors.add(Sensor(name, SensorType[sensor_type], bool(active)))
            except KeyError:
                logger.warning(f"Skipping sensor {name} with unknown type {sensor_type}")
        return sensors

    def _get_state(self, key: str) -> str:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM system_state WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else ""

    def _set_state(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO system_state (key, value) VALUES (?, ?)",
                (key, value)
            )
            conn.commit()

    def get_alarm_status(self) -> AlarmStatus:
        try:
            return AlarmStatus[self._get_state(ALARM_STATUS_KEY)]
        except KeyError:
            return AlarmStatus.NO_ALARM

    def set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        self._set_state(ALARM_STATUS_KEY, alarm_status.name)

    def get_arming_status(self) -> ArmingStatus:
        try:
            return ArmingStatus[self._get_state(ARMING_STATUS_KEY)]
        except KeyError:
            return ArmingStatus.DISARMED

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        self._set_state(ARMING_STATUS_KEY, arming_status.name)
