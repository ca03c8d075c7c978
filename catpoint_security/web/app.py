"""Flask web application for the security control panel."""

from typing import Optional, Tuple

from flask import Flask, jsonify, request, Response

from ..config.defaults import SYSTEM_CONSTANTS
from ..config_manager import ConfigManager
from ..models.security import ArmingStatus, Sensor, SensorType
from ..services.listener_notifier import EventLogListener
from ..services.security_service import SecurityService
from ..system import build_security_service
from ..utils import decode_image
from ..logging_config import get_logger

logger = get_logger("web_app")


def _error(message: str, status_code: int) -> Tuple[Response, int]:
    return jsonify({'success': False, 'error': message}), status_code


class SecurityWebApp:
    """JSON control panel over a SecurityService."""

    def __init__(self, service: SecurityService, event_log_size: int = 100):
        """Initialize web application."""
        self.app = Flask(__name__)
        self.service = service

        self.event_log = EventLogListener(max_events=event_log_size)
        self.service.add_status_listener(self.event_log)

        self.app.config['MAX_CONTENT_LENGTH'] = SYSTEM_CONSTANTS["MAX_UPLOAD_SIZE_MB"] * 1024 * 1024

        self._setup_routes()
        self._setup_error_handlers()

        logger.info("Security control panel initialized")

    def _find_sensor(self, sensor_type: str, name: str) -> Optional[Sensor]:
        try:
            key = (name, SensorType[sensor_type.upper()])
        except KeyError:
            return None
        for sensor in self.service.get_sensors():
            if sensor.key == key:
                return sensor
        return None

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/api/status')
        def api_status():
            """Get system status."""
            try:
                return jsonify({'success': True, 'data': self.service.get_status()})
            except Exception as e:
                logger.error(f"Error getting status: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/arming', methods=['POST'])
        def api_set_arming():
            """Arm or disarm the system."""
            data = request.get_json(silent=True) or {}
            try:
                arming_status = ArmingStatus[str(data.get('status', '')).upper()]
            except KeyError:
                return _error(f"Unknown arming status: {data.get('status')}", 400)

            try:
                self.service.set_arming_status(arming_status)
                return jsonify({'success': True, 'data': self.service.get_status()})
            except Exception as e:
                logger.error(f"Error setting arming status: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/sensors', methods=['GET'])
        def api_get_sensors():
            """List sensors."""
            sensors = sorted(self.service.get_sensors())
            return jsonify({'success': True, 'data': [s.to_dict() for s in sensors]})

        @self.app.route('/api/sensors', methods=['POST'])
        def api_add_sensor():
            """Add a sensor."""
            data = request.get_json(silent=True) or {}
            try:
                sensor = Sensor.from_dict({'name': data['name'],
                                           'sensor_type': data['sensor_type']})
            except (KeyError, ValueError) as e:
                return _error(f"Invalid sensor: {e}", 400)

            try:
                self.service.add_sensor(sensor)
                return jsonify({'success': True, 'data': sensor.to_dict()}), 201
            except Exception as e:
                logger.error(f"Error adding sensor: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/sensors/<sensor_type>/<path:name>', methods=['DELETE'])
        def api_remove_sensor(sensor_type, name):
            """Remove a sensor."""
            sensor = self._find_sensor(sensor_type, name)
            if sensor is None:
                return _error(f"Sensor not found: {sensor_type}/{name}", 404)

            try:
                self.service.remove_sensor(sensor)
                return jsonify({'success': True, 'message': f"Sensor {name} removed"})
            except Exception as e:
                logger.error(f"Error removing sensor: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/sensors/<sensor_type>/<path:name>/activation', methods=['POST'])
        def api_change_activation(sensor_type, name):
            """Report a sensor activation change."""
            sensor = self._find_sensor(sensor_type, name)
            if sensor is None:
                return _error(f"Sensor not found: {sensor_type}/{name}", 404)

            data = request.get_json(silent=True) or {}
            active = data.get('active')
            if not isinstance(active, bool):
                return _error("'active' must be true or false", 400)

            try:
                self.service.change_sensor_activation(sensor, active)
                return jsonify({'success': True, 'data': self.service.get_status()})
            except Exception as e:
                logger.error(f"Error changing sensor activation: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/image', methods=['POST'])
        def api_process_image():
            """Run an uploaded camera frame through the cat detector."""
            upload = request.files.get('image')
            if upload is None:
                return _error("No image uploaded", 400)

            image = decode_image(upload.read())
            if image is None:
                return _error("Uploaded file is not a readable image", 400)

            try:
                self.service.process_image(image)
                return jsonify({'success': True, 'data': self.service.get_status()})
            except Exception as e:
                logger.error(f"Error processing image: {e}")
                return _error(str(e), 500)

        @self.app.route('/api/events')
        def api_events():
            """Recent state change events."""
            limit = request.args.get('limit', type=int)
            return jsonify({'success': True, 'data': self.event_log.get_events(limit)})

    def _setup_error_handlers(self):
        """Answer HTTP errors raised outside the views with the JSON envelope."""

        @self.app.errorhandler(404)
        def not_found(e):
            return _error(f"Not found: {request.path}", 404)

        @self.app.errorhandler(405)
        def method_not_allowed(e):
            return _error(f"Method {request.method} not allowed for {request.path}", 405)

        @self.app.errorhandler(413)
        def payload_too_large(e):
            limit_mb = self.app.config["MAX_CONTENT_LENGTH"] / (1024 * 1024)
            return _error(f"Upload exceeds {limit_mb:g} MB", 413)

    def get_app(self) -> Flask:
        """Get Flask app instance."""
        return self.app

    def run(self, host: str = '0.0.0.0', port: int = 5000, debug: bool = False):
        """Run the web application."""
        logger.info(f"Starting control panel on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug, threaded=True)


def create_app(config_manager: Optional[ConfigManager] = None,
               service: Optional[SecurityService] = None) -> Flask:
    """Factory function to create Flask app."""
    config_manager = config_manager or ConfigManager()
    config = config_manager.get_config()
    service = service or build_security_service(config)
    web_app = SecurityWebApp(service, event_log_size=config.event_log_size)
    return web_app.get_app()
