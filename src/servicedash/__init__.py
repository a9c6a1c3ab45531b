"""
servicedash - remote Docker fleet orchestration and metrics.
Collects container metrics from remote servers over SSH and exposes
container lifecycle operations and connection management.
"""

__version__ = '1.0.0'
