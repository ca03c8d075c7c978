#!/usr/bin/env python3
"""Entry point for the Catpoint security controller."""

import argparse
import sys
import traceback

from catpoint_security.config_manager import ConfigManager
from catpoint_security.exceptions import SecuritySystemError
from catpoint_security.logging_config import setup_logging, get_logger
from catpoint_security.system import build_security_service
from catpoint_security.web.app import SecurityWebApp


def main(argv=None):
    """Main entry point for the security controller."""
    parser = argparse.ArgumentParser(description="Catpoint security controller")
    parser.add_argument("--config", default=None, help="Path to JSON configuration file")
    parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode")
    args = parser.parse_args(argv)

    config_manager = ConfigManager(args.config)
    config = config_manager.get_config()

    setup_logging(config.log_level, config.log_dir)
    logger = get_logger("start_security")
    logger.info("Starting Catpoint security controller")

    if not config_manager.validate_config():
        logger.error(f"Invalid configuration in {config_manager.config_path}")
        return 1

    try:
        service = build_security_service(config)
        web_app = SecurityWebApp(service, event_log_size=config.event_log_size)
        web_app.run(host=config.web_host, port=config.web_port, debug=args.debug)
    except SecuritySystemError as e:
        logger.error(f"Security controller failed to start: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    except Exception as e:
        logger.error(f"Security controller failed: {e}")
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
