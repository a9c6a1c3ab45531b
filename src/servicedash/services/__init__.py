"""
On-demand services used by the request layer
"""

from .connection_registry import ConnectionRegistry
from .remote_containers import RemoteContainerService
from .metrics_queries import MetricsQueryService

__all__ = [
    'ConnectionRegistry',
    'RemoteContainerService',
    'MetricsQueryService'
]
