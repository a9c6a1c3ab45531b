# src/servicedash/utils/logging_config.py
"""
Logging setup for the collector and the on-demand services.
"""

import logging
import logging.handlers
from pathlib import Path
from datetime import datetime

MAIN_LOG_FILE = 'servicedash.log'
ERROR_LOG_FILE = 'errors.log'

# Loggers that follow --debug; anything else stays at the configured level
COMPONENT_LOGGERS = (
    'collector',
    'ssh_connector',
    'remote_containers',
    'connection_registry',
    'connection_resolver',
    'metrics_queries',
    'server_registry',
)


class LoggingConfig:
    """Applies a LoggingSettings section to the root logger"""

    def __init__(self, settings, enable_debug=False):
        self.settings = settings
        self.enable_debug = enable_debug
        self.log_dir = Path(settings.log_dir)

    @property
    def level(self):
        if self.enable_debug:
            return logging.DEBUG
        level = logging.getLevelName(self.settings.level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {self.settings.level}")
        return level

    def apply(self):
        """Replace the root logger's handlers"""
        root_logger = logging.getLogger()
        root_logger.setLevel(self.level)
        root_logger.handlers.clear()

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.level)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        root_logger.addHandler(console_handler)

        if self.settings.log_to_file:
            for handler in self._file_handlers():
                handler.setFormatter(detailed_formatter)
                root_logger.addHandler(handler)

        self._configure_component_loggers()

    def _file_handlers(self):
        self.log_dir.mkdir(parents=True, exist_ok=True)

        main_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / MAIN_LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        main_handler.setLevel(self.level)

        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / ERROR_LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3
        )
        error_handler.setLevel(logging.ERROR)

        handlers = [main_handler, error_handler]

        # Per-run debug log
        if self.enable_debug:
            debug_log_file = self.log_dir / f'debug_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
            debug_handler = logging.FileHandler(debug_log_file)
            debug_handler.setLevel(logging.DEBUG)
            handlers.append(debug_handler)

        return handlers

    def _configure_component_loggers(self):
        # paramiko transport logging is too verbose at INFO
        logging.getLogger('paramiko').setLevel(logging.WARNING)

        component_level = logging.DEBUG if self.enable_debug else logging.INFO
        for name in COMPONENT_LOGGERS:
            logging.getLogger(name).setLevel(component_level)


def setup_logging_from_settings(settings, enable_debug=False):
    """Set up logging from a LoggingSettings section"""
    LoggingConfig(settings, enable_debug).apply()
