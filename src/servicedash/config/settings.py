# src/servicedash/config/settings.py
"""
Configuration management for collection, SSH, storage and logging.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
import logging


@dataclass
class MetricsConfig:
    """Metrics collection loop settings"""
    collection_interval: float = 30
    retention_hours: float = 24
    startup_delay: float = 10
    max_concurrency: int = 5
    command_timeout: float = 30

    def __post_init__(self):
        if self.collection_interval <= 0:
            raise ValueError("collection_interval must be positive")
        if self.retention_hours <= 0:
            raise ValueError("retention_hours must be positive")
        if self.startup_delay < 0:
            raise ValueError("startup_delay cannot be negative")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.command_timeout <= 0:
            raise ValueError("command_timeout must be positive")


@dataclass
class SSHConfig:
    """SSH transport defaults"""
    connect_timeout: float = 30
    default_port: int = 22
    default_username: str = 'root'

    def __post_init__(self):
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")


@dataclass
class StorageConfig:
    """Backing file locations"""
    connections_file: str = 'data/server-connections.json'
    servers_file: str = 'config/servers.yml'


@dataclass
class LoggingSettings:
    """Logging output settings"""
    level: str = 'INFO'
    log_to_file: bool = True
    log_dir: str = 'logs'


class ConfigManager:
    """Loads servicedash settings from a YAML file"""

    def __init__(self, config_file: str = None):
        self.logger = logging.getLogger('config_manager')

        if config_file:
            self.config_file = Path(config_file)
        else:
            self.config_file = self._find_config_file()

        self.metrics = MetricsConfig()
        self.ssh = SSHConfig()
        self.storage = StorageConfig()
        self.logging = LoggingSettings()

        self._load_config()

    def _find_config_file(self) -> Path:
        """Find configuration file in standard locations"""
        possible_locations = [
            Path('config/servicedash.yml'),
            Path('/app/config/servicedash.yml'),
            Path.home() / '.config' / 'servicedash' / 'servicedash.yml'
        ]

        for location in possible_locations:
            if location.exists():
                self.logger.info(f"Found config file at {location}")
                return location

        # Create default config if none found
        default_location = Path('config/servicedash.yml')
        self._create_default_config(default_location)
        return default_location

    def _create_default_config(self, config_path: Path):
        """Write a configuration file holding the defaults"""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            'metrics': asdict(MetricsConfig()),
            'ssh': asdict(SSHConfig()),
            'storage': asdict(StorageConfig()),
            'logging': asdict(LoggingSettings())
        }

        with open(config_path, 'w') as f:
            yaml.dump(default_config, f, default_flow_style=False, indent=2)

        self.logger.info(f"Created default configuration at {config_path}")

    def _load_config(self):
        """Load configuration from file"""
        try:
            with open(self.config_file, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            self.metrics = MetricsConfig(**(config_data.get('metrics') or {}))
            self.ssh = SSHConfig(**(config_data.get('ssh') or {}))
            self.storage = StorageConfig(**(config_data.get('storage') or {}))
            self.logging = LoggingSettings(**(config_data.get('logging') or {}))

            self.logger.info(f"Loaded configuration from {self.config_file}")

        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}")
            raise

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metrics': asdict(self.metrics),
            'ssh': asdict(self.ssh),
            'storage': asdict(self.storage),
            'logging': asdict(self.logging)
        }

    def reload_config(self):
        """Reload configuration from file"""
        self.logger.info("Reloading configuration")
        self._load_config()


# Global configuration instance
config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration manager instance"""
    global config_manager
    if config_manager is None:
        config_manager = ConfigManager()
    return config_manager


def initialize_config(config_file: str = None) -> ConfigManager:
    """Initialize configuration manager with specific config file"""
    global config_manager
    config_manager = ConfigManager(config_file)
    return config_manager
