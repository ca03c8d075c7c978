"""Unit tests for the alarm decision engine."""

import unittest
import tempfile
import shutil
import threading
from unittest.mock import Mock, call
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catpoint_security.models.security import AlarmStatus, ArmingStatus, Sensor, SensorType
from catpoint_security.services.interfaces import CatDetectorInterface, StatusListener
from catpoint_security.services.repository import InMemorySecurityRepository
from catpoint_security.services.sqlite_repository import SQLiteSecurityRepository
from catpoint_security.services.listener_notifier import ListenerNotifier
from catpoint_security.services.error_handler import ErrorHandler
from catpoint_security.services.security_service import SecurityService

ALL_ALARM_STATUSES = list(AlarmStatus)
ARMED_STATUSES = [ArmingStatus.ARMED_HOME, ArmingStatus.ARMED_AWAY]


class TestSecurityService(unittest.TestCase):
    """Test cases for SecurityService."""

    def setUp(self):
        """Set up test fixtures."""
        self.repository = InMemorySecurityRepository()
        self.detector = Mock(spec=CatDetectorInterface)
        self.detector.image_contains_cat.return_value = False
        self.listener = Mock(spec=StatusListener)

        self.service = SecurityService(
            self.repository, self.detector, ListenerNotifier(error_handler=ErrorHandler())
        )
        self.service.add_status_listener(self.listener)

        self.door = Sensor("Front door", SensorType.DOOR)
        self.window = Sensor("Kitchen window", SensorType.WINDOW)
        self.repository.add_sensor(self.door)
        self.repository.add_sensor(self.window)

    def _arm(self, arming_status, alarm_status=AlarmStatus.NO_ALARM):
        self.repository.set_arming_status(arming_status)
        self.repository.set_alarm_status(alarm_status)

    def test_initial_state(self):
        """Test defaults after construction."""
        service = SecurityService(InMemorySecurityRepository(), self.detector)
        self.assertEqual(service.get_alarm_status(), AlarmStatus.NO_ALARM)
        self.assertEqual(service.get_arming_status(), ArmingStatus.DISARMED)
        self.assertFalse(service.is_cat_detected())
        self.assertEqual(service.get_sensors(), set())

    def test_armed_sensor_activated_goes_pending(self):
        """Test activating a sensor while armed moves NO_ALARM to PENDING_ALARM."""
        for arming_status in ARMED_STATUSES:
            with self.subTest(arming_status=arming_status):
                self._arm(arming_status)
                self.door.active = False

                self.service.change_sensor_activation(self.door, True)

                self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)

    def test_pending_sensor_activated_goes_alarm(self):
        """Test activating a sensor while pending raises the alarm."""
        self._arm(ArmingStatus.ARMED_AWAY, AlarmStatus.PENDING_ALARM)

        self.service.change_sensor_activation(self.window, True)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.ALARM)
        self.listener.on_alarm_status_changed.assert_called_once_with(AlarmStatus.ALARM)

    def test_pending_already_active_sensor_activated_goes_alarm(self):
        """Test re-activating an already active sensor while pending raises the alarm."""
        self._arm(ArmingStatus.ARMED_HOME, AlarmStatus.PENDING_ALARM)
        self.door.active = True

        self.service.change_sensor_activation(self.door, True)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.ALARM)

    def test_pending_active_sensor_deactivated_goes_no_alarm(self):
        """Test deactivating an active sensor while pending clears the alarm."""
        self._arm(ArmingStatus.ARMED_HOME, AlarmStatus.PENDING_ALARM)
        self.door.active = True

        self.service.change_sensor_activation(self.door, False)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)
        self.assertFalse(self.door.active)

    def test_alarm_is_sticky_for_sensor_changes(self):
        """Test sensor changes never affect a raised alarm."""
        for arming_status in ARMED_STATUSES:
            for previous, active in [(False, True), (True, True), (True, False), (False, False)]:
                with self.subTest(arming_status=arming_status, previous=previous, active=active):
                    self._arm(arming_status, AlarmStatus.ALARM)
                    self.door.active = previous
                    self.listener.reset_mock()

                    self.service.change_sensor_activation(self.door, active)

                    self.assertEqual(self.service.get_alarm_status(), AlarmStatus.ALARM)
                    self.listener.on_alarm_status_changed.assert_not_called()
                    self.assertEqual(self.door.active, active)

    def test_inactive_sensor_deactivated_never_changes_alarm(self):
        """Test deactivating an inactive sensor leaves every alarm status alone."""
        for alarm_status in ALL_ALARM_STATUSES:
            with self.subTest(alarm_status=alarm_status):
                self._arm(ArmingStatus.ARMED_HOME, alarm_status)
                self.window.active = False
                self.listener.reset_mock()

                self.service.change_sensor_activation(self.window, False)

                self.assertEqual(self.service.get_alarm_status(), alarm_status)
                self.listener.on_alarm_status_changed.assert_not_called()

    def test_disarmed_sensor_activated_no_change(self):
        """Test sensor activation while disarmed does not escalate."""
        self.service.change_sensor_activation(self.door, True)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)
        self.listener.on_alarm_status_changed.assert_not_called()
        self.assertTrue(self.door.active)

    def test_sensor_activation_is_persisted(self):
        """Test the new flag is stored in the repository."""
        self.service.change_sensor_activation(self.door, True)

        stored = {s.key: s.active for s in self.repository.get_sensors()}
        self.assertTrue(stored[self.door.key])
        self.assertFalse(stored[self.window.key])

    def test_unknown_sensor_is_tracked(self):
        """Test a sensor seen for the first time is added to the store."""
        motion = Sensor("Hallway", SensorType.MOTION)

        self.service.change_sensor_activation(motion, True)

        self.assertIn(motion, self.service.get_sensors())

    def test_previous_flag_read_from_tracked_sensor(self):
        """Test a fresh object for a tracked active sensor still counts as deactivation."""
        self._arm(ArmingStatus.ARMED_HOME, AlarmStatus.PENDING_ALARM)
        self.door.active = True

        self.service.change_sensor_activation(Sensor("Front door", SensorType.DOOR), False)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)

    def test_activate_twice_then_deactivate_keeps_alarm(self):
        """Test two activations raise the alarm and a later deactivation does not clear it."""
        self._arm(ArmingStatus.ARMED_HOME)

        self.service.change_sensor_activation(self.door, True)
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)

        self.service.change_sensor_activation(self.door, True)
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.ALARM)

        self.service.change_sensor_activation(self.door, False)
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.ALARM)

    def test_pending_then_deactivate_scenario(self):
        """Test activate then deactivate returns to NO_ALARM."""
        self._arm(ArmingStatus.ARMED_HOME)

        self.service.change_sensor_activation(self.door, True)
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)

        self.service.change_sensor_activation(self.door, False)
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)

    def test_cat_detected_armed_home_raises_alarm(self):
        """Test a cat seen while armed-home raises the alarm regardless of sensors."""
        for door_active in (False, True):
            with self.subTest(door_active=door_active):
                self._arm(ArmingStatus.ARMED_HOME)
                self.door.active = door_active
                self.detector.image_contains_cat.return_value = True

                self.service.process_image(object())

                self.assertEqual(self.service.get_alarm_status(), AlarmStatus.ALARM)
                self.assertTrue(self.service.is_cat_detected())

    def test_process_image_uses_fixed_threshold(self):
        """Test the detector is called with a 50 percent threshold."""
        image = object()
        self.service.process_image(image)
        self.detector.image_contains_cat.assert_called_once_with(image, 50.0)

    def test_cat_detected_armed_away_no_change(self):
        """Test a cat seen while armed-away does not change the alarm."""
        self._arm(ArmingStatus.ARMED_AWAY, AlarmStatus.PENDING_ALARM)
        self.door.active = True
        self.detector.image_contains_cat.return_value = True

        self.service.process_image(object())

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)
        self.listener.on_cat_detected.assert_called_once_with(True)

    def test_no_cat_no_active_sensors_clears_alarm(self):
        """Test no cat and no active sensor sets NO_ALARM."""
        for alarm_status in ALL_ALARM_STATUSES:
            with self.subTest(alarm_status=alarm_status):
                self._arm(ArmingStatus.ARMED_HOME, alarm_status)

                self.service.process_image(object())

                self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)

    def test_no_cat_with_active_sensor_no_change(self):
        """Test no cat with an active sensor keeps the alarm status."""
        self._arm(ArmingStatus.ARMED_HOME, AlarmStatus.PENDING_ALARM)
        self.window.active = True

        self.service.process_image(object())

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)
        self.assertFalse(self.service.is_cat_detected())

    def test_process_image_notifies_cat_result(self):
        """Test listeners hear every detection result."""
        self.detector.image_contains_cat.return_value = True
        self.service.process_image(object())
        self.detector.image_contains_cat.return_value = False
        self.service.process_image(object())

        self.assertEqual(self.listener.on_cat_detected.call_args_list, [call(True), call(False)])

    def test_detector_failure_propagates_without_state_change(self):
        """Test detector errors reach the caller and leave state untouched."""
        self._arm(ArmingStatus.ARMED_HOME, AlarmStatus.PENDING_ALARM)
        self.detector.image_contains_cat.side_effect = RuntimeError("camera offline")

        with self.assertRaises(RuntimeError):
            self.service.process_image(object())

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)
        self.assertFalse(self.service.is_cat_detected())
        self.listener.on_cat_detected.assert_not_called()

    def test_disarm_clears_alarm(self):
        """Test disarming always sets NO_ALARM."""
        for alarm_status in ALL_ALARM_STATUSES:
            with self.subTest(alarm_status=alarm_status):
                self._arm(ArmingStatus.ARMED_HOME, alarm_status)

                self.service.set_arming_status(ArmingStatus.DISARMED)

                self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)
                self.assertEqual(self.service.get_arming_status(), ArmingStatus.DISARMED)

    def test_arming_resets_sensors(self):
        """Test arming home or away resets every sensor to inactive."""
        for arming_status in ARMED_STATUSES:
            with self.subTest(arming_status=arming_status):
                self.repository.set_arming_status(ArmingStatus.DISARMED)
                self.repository.set_alarm_status(AlarmStatus.NO_ALARM)
                self.door.active = True
                self.window.active = True

                self.service.set_arming_status(arming_status)

                self.assertTrue(all(not s.active for s in self.service.get_sensors()))
                self.assertEqual(self.service.get_arming_status(), arming_status)
                self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)

    def test_arming_reset_clears_pending(self):
        """Test resetting active sensors while pending drops back to NO_ALARM."""
        self._arm(ArmingStatus.ARMED_AWAY, AlarmStatus.PENDING_ALARM)
        self.door.active = True

        self.service.set_arming_status(ArmingStatus.ARMED_HOME)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)
        self.assertFalse(self.door.active)

    def test_arming_home_after_cat_raises_alarm(self):
        """Test arming home with a cat in view raises the alarm and keeps sensors."""
        self.door.active = True
        self.detector.image_contains_cat.return_value = True
        self.service.process_image(object())

        self.service.set_arming_status(ArmingStatus.ARMED_HOME)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.ALARM)
        self.assertTrue(self.door.active)

    def test_arming_away_after_cat_resets_sensors(self):
        """Test arming away ignores the cat and resets sensors."""
        self.door.active = True
        self.detector.image_contains_cat.return_value = True
        self.service.process_image(object())

        self.service.set_arming_status(ArmingStatus.ARMED_AWAY)

        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)
        self.assertFalse(self.door.active)

    def test_set_arming_notifies_sensor_status(self):
        """Test every arming change notifies listeners."""
        for arming_status in ArmingStatus:
            with self.subTest(arming_status=arming_status):
                self.listener.reset_mock()
                self.service.set_arming_status(arming_status)
                self.listener.on_sensor_status_changed.assert_called_once_with()

    def test_removed_listener_not_notified(self):
        """Test listeners stop receiving events after removal."""
        self.service.remove_status_listener(self.listener)
        self.service.set_arming_status(ArmingStatus.DISARMED)
        self.listener.on_alarm_status_changed.assert_not_called()
        self.listener.on_sensor_status_changed.assert_not_called()

    def test_add_and_remove_sensor(self):
        """Test sensor management through the service."""
        motion = Sensor("Hallway", SensorType.MOTION)

        self.service.add_sensor(motion)
        self.assertIn(motion, self.service.get_sensors())

        self.service.remove_sensor(motion)
        self.assertNotIn(motion, self.service.get_sensors())
        self.assertEqual(self.listener.on_sensor_status_changed.call_count, 2)

    def test_get_status(self):
        """Test the status snapshot."""
        self._arm(ArmingStatus.ARMED_HOME, AlarmStatus.PENDING_ALARM)
        self.door.active = True

        status = self.service.get_status()

        self.assertEqual(status["alarm_status"], "PENDING_ALARM")
        self.assertEqual(status["arming_status"], "ARMED_HOME")
        self.assertEqual(status["arming_description"], "Armed - At Home")
        self.assertFalse(status["cat_detected"])
        self.assertEqual([s["name"] for s in status["sensors"]], ["Front door", "Kitchen window"])
        self.assertTrue(status["sensors"][0]["active"])

    def test_queries_wait_for_running_operation(self):
        """Test queries block while another thread holds the engine lock."""
        queries = {
            "alarm": self.service.get_alarm_status,
            "arming": self.service.get_arming_status,
            "sensors": self.service.get_sensors,
            "cat": self.service.is_cat_detected,
        }
        for label, query in queries.items():
            with self.subTest(query=label):
                results = []
                worker = threading.Thread(target=lambda: results.append(query()))

                with self.service._lock:
                    worker.start()
                    worker.join(timeout=0.2)
                    self.assertTrue(worker.is_alive())
                    self.assertEqual(results, [])

                worker.join(timeout=5)
                self.assertFalse(worker.is_alive())
                self.assertEqual(len(results), 1)


class TestSecurityServiceWithSQLite(unittest.TestCase):
    """Test cases for SecurityService over a store that hands out fresh sensor objects."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = tempfile.mkdtemp()
        self.database_path = os.path.join(self.test_dir, "security.db")
        self.repository = SQLiteSecurityRepository(self.database_path)
        self.detector = Mock(spec=CatDetectorInterface)
        self.detector.image_contains_cat.return_value = False
        self.service = SecurityService(
            self.repository, self.detector, ListenerNotifier(error_handler=ErrorHandler())
        )
        self.service.add_sensor(Sensor("Front door", SensorType.DOOR))
        self.service.add_sensor(Sensor("Kitchen window", SensorType.WINDOW))

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _active_flags(self):
        return {sensor.name: sensor.active for sensor in self.repository.get_sensors()}

    def test_activation_cycle_is_persisted(self):
        """Test escalation, camera frames and arming reset against stored state."""
        self.service.set_arming_status(ArmingStatus.ARMED_AWAY)

        self.service.change_sensor_activation(Sensor("Front door", SensorType.DOOR), True)
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)
        self.assertEqual(self._active_flags(), {"Front door": True, "Kitchen window": False})

        # No cat, but a stored sensor is active: alarm status holds
        self.service.process_image(object())
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.PENDING_ALARM)

        self.service.set_arming_status(ArmingStatus.ARMED_HOME)
        self.assertEqual(self._active_flags(), {"Front door": False, "Kitchen window": False})
        self.assertEqual(self.service.get_alarm_status(), AlarmStatus.NO_ALARM)
        self.assertEqual(self.service.get_arming_status(), ArmingStatus.ARMED_HOME)

    def test_cat_while_armed_home_survives_reopen(self):
        """Test a raised alarm and active sensor are read back by a new store."""
        self.service.set_arming_status(ArmingStatus.ARMED_HOME)
        self.service.change_sensor_activation(Sensor("Kitchen window", SensorType.WINDOW), True)
        self.detector.image_contains_cat.return_value = True

        self.service.process_image(object())

        reopened = SQLiteSecurityRepository(self.database_path)
        self.assertEqual(reopened.get_alarm_status(), AlarmStatus.ALARM)
        self.assertEqual(reopened.get_arming_status(), ArmingStatus.ARMED_HOME)
        self.assertEqual({s.name: s.active for s in reopened.get_sensors()},
                         {"Front door": False, "Kitchen window": True})


if __name__ == '__main__':
    unittest.main()
