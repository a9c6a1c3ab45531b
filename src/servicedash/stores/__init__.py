"""
Stores backing the collector and the query services
"""

from .metrics_store import MetricsStore, InMemoryMetricsStore
from .server_registry import ServerRegistry, StaticServerRegistry, YamlServerRegistry

__all__ = [
    'MetricsStore',
    'InMemoryMetricsStore',
    'ServerRegistry',
    'StaticServerRegistry',
    'YamlServerRegistry'
]
