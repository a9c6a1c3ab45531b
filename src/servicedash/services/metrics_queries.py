# src/servicedash/services/metrics_queries.py
"""
Read-side queries over collected container metrics for dashboard views.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from ..errors import NotFoundError
from ..models import ContainerMetricSample, utc_now
from ..stores.metrics_store import MetricsStore
from ..stores.server_registry import ServerRegistry


@dataclass
class ContainerMetricDataPoint:
    timestamp: datetime
    cpu_percentage: float
    memory_usage_bytes: int
    memory_percentage: float
    memory_limit_bytes: int
    network_rx_bytes: int
    network_tx_bytes: int
    block_read_bytes: int
    block_write_bytes: int

    @classmethod
    def from_sample(cls, sample: ContainerMetricSample) -> 'ContainerMetricDataPoint':
        return cls(
            timestamp=sample.timestamp,
            cpu_percentage=sample.cpu_percentage,
            memory_usage_bytes=sample.memory_usage_bytes,
            memory_percentage=sample.memory_percentage,
            memory_limit_bytes=sample.memory_limit_bytes,
            network_rx_bytes=sample.network_rx_bytes,
            network_tx_bytes=sample.network_tx_bytes,
            block_read_bytes=sample.block_read_bytes,
            block_write_bytes=sample.block_write_bytes
        )


@dataclass
class ServerMetricsSummary:
    """Fleet view: totals over the latest sample of each container"""
    server_id: str
    server_name: str
    host_address: str
    status: str
    container_count: int = 0
    total_cpu_percentage: float = 0.0
    total_memory_usage_bytes: int = 0
    total_memory_limit_bytes: int = 0
    total_network_rx_bytes: int = 0
    total_network_tx_bytes: int = 0
    last_metrics_update: Optional[datetime] = None


@dataclass
class ContainerMetricsSummary:
    container_id: str
    container_name: str
    current_cpu_percentage: float
    current_memory_usage_bytes: int
    current_memory_percentage: float
    memory_limit_bytes: int
    current_network_rx_bytes: int
    current_network_tx_bytes: int
    avg_cpu_percentage: float
    avg_memory_percentage: float
    max_cpu_percentage: float
    max_memory_percentage: float
    history: List[ContainerMetricDataPoint] = field(default_factory=list)


@dataclass
class ServerContainersMetrics:
    server_id: str
    server_name: str
    last_updated: datetime
    containers: List[ContainerMetricsSummary] = field(default_factory=list)


@dataclass
class ContainerMetricsHistory:
    server_id: str
    container_id: str
    container_name: str
    data_points: List[ContainerMetricDataPoint] = field(default_factory=list)


def _group_by_container(samples: List[ContainerMetricSample]) -> Dict[str, List[ContainerMetricSample]]:
    groups: Dict[str, List[ContainerMetricSample]] = OrderedDict()
    for sample in sorted(samples, key=lambda s: s.timestamp):
        groups.setdefault(sample.container_id, []).append(sample)
    return groups


class MetricsQueryService:
    """Summaries and history built from the metrics store"""

    def __init__(self, metrics_store: MetricsStore, server_registry: ServerRegistry,
                 clock: Callable[[], datetime] = utc_now):
        self.metrics_store = metrics_store
        self.server_registry = server_registry
        self.clock = clock
        self.logger = logging.getLogger('metrics_queries')

    def _cutoff(self, minutes: int) -> datetime:
        return self.clock() - timedelta(minutes=minutes)

    def get_all_servers_summary(self, minutes: int = 60) -> List[ServerMetricsSummary]:
        """One summary per managed server, sorted by name"""
        samples = self.metrics_store.query_range(since=self._cutoff(minutes))

        # Latest sample per (server, container)
        latest: Dict[tuple, ContainerMetricSample] = {}
        for sample in samples:
            key = (sample.server_id, sample.container_id)
            current = latest.get(key)
            if current is None or sample.timestamp > current.timestamp:
                latest[key] = sample

        summaries = []
        for server in self.server_registry.list_servers():
            server_samples = [s for (server_id, _), s in latest.items() if server_id == server.id]
            summaries.append(ServerMetricsSummary(
                server_id=server.id,
                server_name=server.name,
                host_address=server.host_address,
                status=server.status.value,
                container_count=len(server_samples),
                total_cpu_percentage=sum(s.cpu_percentage for s in server_samples),
                total_memory_usage_bytes=sum(s.memory_usage_bytes for s in server_samples),
                total_memory_limit_bytes=sum(s.memory_limit_bytes for s in server_samples),
                total_network_rx_bytes=sum(s.network_rx_bytes for s in server_samples),
                total_network_tx_bytes=sum(s.network_tx_bytes for s in server_samples),
                last_metrics_update=max((s.timestamp for s in server_samples), default=None)
            ))

        return sorted(summaries, key=lambda s: s.server_name)

    def get_server_containers_metrics(self, server_id: str, minutes: int = 60) -> ServerContainersMetrics:
        """
        Per-container current, average and peak values for one server.

        Raises:
            NotFoundError: if the server is not registered
        """
        server = self.server_registry.get_server(server_id)
        if server is None:
            raise NotFoundError('Server', server_id)

        samples = self.metrics_store.query_range(server_id=server.id, since=self._cutoff(minutes))

        containers = []
        for container_id, group in _group_by_container(samples).items():
            last = group[-1]
            containers.append(ContainerMetricsSummary(
                container_id=container_id,
                container_name=last.container_name,
                current_cpu_percentage=last.cpu_percentage,
                current_memory_usage_bytes=last.memory_usage_bytes,
                current_memory_percentage=last.memory_percentage,
                memory_limit_bytes=last.memory_limit_bytes,
                current_network_rx_bytes=last.network_rx_bytes,
                current_network_tx_bytes=last.network_tx_bytes,
                avg_cpu_percentage=sum(s.cpu_percentage for s in group) / len(group),
                avg_memory_percentage=sum(s.memory_percentage for s in group) / len(group),
                max_cpu_percentage=max(s.cpu_percentage for s in group),
                max_memory_percentage=max(s.memory_percentage for s in group),
                history=[ContainerMetricDataPoint.from_sample(s) for s in group]
            ))

        containers.sort(key=lambda c: c.container_name)

        return ServerContainersMetrics(
            server_id=server.id,
            server_name=server.name,
            last_updated=max((s.timestamp for s in samples), default=self.clock()),
            containers=containers
        )

    def get_container_history(self, server_id: str, container_id: str, minutes: int = 60) -> ContainerMetricsHistory:
        """Ordered data points for one container"""
        samples = sorted(
            self.metrics_store.query_range(server_id=str(server_id), container_id=container_id,
                                           since=self._cutoff(minutes)),
            key=lambda s: s.timestamp
        )

        return ContainerMetricsHistory(
            server_id=str(server_id),
            container_id=container_id,
            container_name=samples[0].container_name if samples else container_id,
            data_points=[ContainerMetricDataPoint.from_sample(s) for s in samples]
        )
