"""
Background collectors
"""

from .base_collector import CollectorState, ServerCollectionResult, TickReport
from .metrics_collector import MetricsCollector, FLEET_STATS_COMMAND

__all__ = [
    'CollectorState',
    'ServerCollectionResult',
    'TickReport',
    'MetricsCollector',
    'FLEET_STATS_COMMAND'
]
