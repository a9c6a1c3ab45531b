# src/servicedash/collectors/base_collector.py
"""
Result types shared by collectors.
A per-server result carries either samples or the error that prevented them,
so one failing server never hides the others.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ..models import ContainerMetricSample


class CollectorState(str, Enum):
    IDLE = 'idle'
    COLLECTING = 'collecting'
    CLEANING = 'cleaning'
    SLEEPING = 'sleeping'
    STOPPED = 'stopped'


@dataclass
class ServerCollectionResult:
    """Outcome of collecting from one server during a tick"""
    server_id: str
    server_name: str = ''
    samples: List[ContainerMetricSample] = field(default_factory=list)
    error: Optional[str] = None
    skipped: bool = False

    @property
    def success(self) -> bool:
        return self.error is None and not self.skipped


@dataclass
class TickReport:
    """Summary of one collect-then-cleanup cycle"""
    timestamp: datetime
    servers_polled: int = 0
    servers_failed: int = 0
    servers_skipped: int = 0
    samples_collected: int = 0
    samples_persisted: bool = False
    samples_deleted: int = 0
    results: List[ServerCollectionResult] = field(default_factory=list)

    def to_dict(self):
        return {
            'timestamp': self.timestamp.isoformat(),
            'servers_polled': self.servers_polled,
            'servers_failed': self.servers_failed,
            'servers_skipped': self.servers_skipped,
            'samples_collected': self.samples_collected,
            'samples_persisted': self.samples_persisted,
            'samples_deleted': self.samples_deleted
        }
