"""
Configuration loading for servicedash
"""

from .settings import ConfigManager, MetricsConfig, SSHConfig, StorageConfig, LoggingSettings, get_config, initialize_config

__all__ = [
    'ConfigManager',
    'MetricsConfig',
    'SSHConfig',
    'StorageConfig',
    'LoggingSettings',
    'get_config',
    'initialize_config'
]
