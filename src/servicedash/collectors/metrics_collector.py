# src/servicedash/collectors/metrics_collector.py
"""
Background container metrics collector.

Every tick polls all Online servers over SSH (at most max_concurrency at a
time), stores the parsed samples in one batch and deletes samples older than
the retention window. Failures are logged per server and never stop the loop.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .base_collector import CollectorState, ServerCollectionResult, TickReport
from ..config.settings import MetricsConfig, SSHConfig
from ..connectors.connection_resolver import connection_info_for_server
from ..connectors.ssh_connector import CommandExecutor
from ..errors import PersistenceError, RemoteCommandError
from ..models import ManagedServer, ServerStatus, utc_now
from ..parsers.docker_output import FLEET_STATS_FORMAT, parse_fleet_stats
from ..stores.metrics_store import MetricsStore
from ..stores.server_registry import ServerRegistry

FLEET_STATS_COMMAND = f'docker stats --no-stream --format "{FLEET_STATS_FORMAT}"'


class MetricsCollector:
    """
    Periodic fleet-wide collector.

    Run it in the background with start()/stop(), or drive single ticks with
    run_once().
    """

    def __init__(self, server_registry: ServerRegistry, metrics_store: MetricsStore,
                 executor: CommandExecutor, settings: MetricsConfig = None,
                 ssh_settings: SSHConfig = None, clock: Callable[[], datetime] = utc_now):
        self.server_registry = server_registry
        self.metrics_store = metrics_store
        self.executor = executor
        self.settings = settings or MetricsConfig()
        self.ssh_settings = ssh_settings or SSHConfig()
        self.clock = clock

        self.logger = logging.getLogger('collector.metrics')
        self.state = CollectorState.IDLE
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def retention(self) -> timedelta:
        return timedelta(hours=self.settings.retention_hours)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start the collection loop in a daemon thread"""
        if self.is_running:
            self.logger.warning("Container metrics collector already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name='metrics-collector', daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        """
        Signal the loop to stop and wait for it.
        Collections already executing a command are allowed to finish.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                self.logger.warning("Container metrics collector did not stop within timeout")
            else:
                self._thread = None

    def join(self, timeout: Optional[float] = None):
        """Block until the loop thread exits or timeout elapses"""
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self):
        """Collection loop; returns once stop() is called"""
        self.logger.info(
            f"Container metrics collector started (interval: {self.settings.collection_interval}s, "
            f"retention: {self.settings.retention_hours}h)")

        # Give the rest of the application time to start
        if self._stop_event.wait(self.settings.startup_delay):
            self._finish()
            return

        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                self.logger.exception("Error in container metrics collector")

            self.state = CollectorState.SLEEPING
            if self._stop_event.wait(self.settings.collection_interval):
                break
            self.state = CollectorState.IDLE

        self._finish()

    def _finish(self):
        self.state = CollectorState.STOPPED
        self.logger.info("Container metrics collector stopped")

    def run_once(self) -> TickReport:
        """One tick: collect from every online server, then clean up"""
        timestamp = self.clock()
        report = TickReport(timestamp=timestamp)

        self.state = CollectorState.COLLECTING
        servers = self.server_registry.list_servers(status=ServerStatus.ONLINE)

        if not servers:
            self.logger.debug("No online servers to collect metrics from")
            self.state = CollectorState.IDLE
            return report

        self.logger.debug(f"Collecting metrics from {len(servers)} online servers")
        results = self.collect_metrics(servers, timestamp)
        report.results = results
        report.servers_polled = len(servers)
        report.servers_failed = sum(1 for r in results if r.error is not None)
        report.servers_skipped = sum(1 for r in results if r.skipped)

        samples = [sample for r in results if r.success for sample in r.samples]
        report.samples_collected = len(samples)
        report.samples_persisted = self._persist(samples, len(servers))

        self.state = CollectorState.CLEANING
        report.samples_deleted = self.cleanup_old_metrics()

        self.state = CollectorState.IDLE
        return report

    def collect_metrics(self, servers: List[ManagedServer], timestamp: datetime) -> List[ServerCollectionResult]:
        """Fan out to the given servers with bounded parallelism"""
        results = []

        with ThreadPoolExecutor(max_workers=self.settings.max_concurrency,
                                thread_name_prefix='metrics-server') as pool:
            future_to_server = {
                pool.submit(self.collect_server_metrics, server, timestamp): server
                for server in servers
            }

            for future in as_completed(future_to_server):
                server = future_to_server[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    # collect_server_metrics already catches; this guards the pool itself
                    self.logger.error(f"Metrics collection task for {server.name} failed: {e}")
                    results.append(ServerCollectionResult(server.id, server.name, error=str(e)))

        return results

    def collect_server_metrics(self, server: ManagedServer, timestamp: datetime) -> ServerCollectionResult:
        """
        Collect every container's stats from one server.
        Any failure is logged and reported as an error result with no samples.
        """
        if self._stop_event.is_set():
            return ServerCollectionResult(server.id, server.name, skipped=True)

        try:
            connection_info = connection_info_for_server(
                server, self.ssh_settings.default_username, self.ssh_settings.default_port)
            result = self.executor.execute(connection_info, FLEET_STATS_COMMAND,
                                           timeout=self.settings.command_timeout)
            if not result.success:
                raise RemoteCommandError(connection_info.host, result)

            samples = parse_fleet_stats(result.stdout, server.id, timestamp)
            return ServerCollectionResult(server.id, server.name, samples=samples)

        except Exception as e:
            self.logger.warning(f"Failed to collect metrics from server {server.name} ({server.id}): {e}")
            return ServerCollectionResult(server.id, server.name, error=str(e))

    def _persist(self, samples, server_count: int) -> bool:
        if not samples:
            return False

        try:
            self.metrics_store.append_samples(samples)
        except PersistenceError as e:
            self.logger.error(f"Failed to store {len(samples)} container metrics: {e}")
            return False

        self.logger.debug(f"Collected {len(samples)} container metrics from {server_count} servers")
        return True

    def cleanup_old_metrics(self, now: Optional[datetime] = None) -> int:
        """Delete samples older than the retention window; returns the count"""
        cutoff = (now or self.clock()) - self.retention

        try:
            deleted = self.metrics_store.delete_older_than(cutoff)
        except PersistenceError as e:
            self.logger.error(f"Failed to clean up old container metrics: {e}")
            return 0

        if deleted > 0:
            self.logger.debug(f"Cleaned up {deleted} old metrics records")
        return deleted
