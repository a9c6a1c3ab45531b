# src/servicedash/stores/metrics_store.py
"""
Time-series store for container metric samples.
"""

import bisect
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from ..models import ContainerMetricSample


class MetricsStore(ABC):
    """Append-only sample storage with range deletes"""

    @abstractmethod
    def append_samples(self, samples: Iterable[ContainerMetricSample]) -> None:
        pass

    @abstractmethod
    def delete_older_than(self, cutoff: datetime) -> int:
        pass

    @abstractmethod
    def query_range(self, server_id: Optional[str] = None, container_id: Optional[str] = None,
                    since: Optional[datetime] = None) -> List[ContainerMetricSample]:
        pass


class InMemoryMetricsStore(MetricsStore):
    """
    Samples kept in timestamp order behind a lock.
    Re-appending a sample with an existing (server, container, timestamp)
    key is ignored.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._samples: List[ContainerMetricSample] = []
        self._timestamps: List[datetime] = []
        self._keys = set()

    def append_samples(self, samples: Iterable[ContainerMetricSample]) -> None:
        with self._lock:
            for sample in samples:
                if sample.key in self._keys:
                    continue
                index = bisect.bisect_right(self._timestamps, sample.timestamp)
                self._timestamps.insert(index, sample.timestamp)
                self._samples.insert(index, sample)
                self._keys.add(sample.key)

    def delete_older_than(self, cutoff: datetime) -> int:
        with self._lock:
            index = bisect.bisect_left(self._timestamps, cutoff)
            for sample in self._samples[:index]:
                self._keys.discard(sample.key)
            del self._samples[:index]
            del self._timestamps[:index]
            return index

    def query_range(self, server_id: Optional[str] = None, container_id: Optional[str] = None,
                    since: Optional[datetime] = None) -> List[ContainerMetricSample]:
        with self._lock:
            start = bisect.bisect_left(self._timestamps, since) if since is not None else 0
            candidates = self._samples[start:]

        return [
            sample for sample in candidates
            if (server_id is None or sample.server_id == str(server_id))
            and (container_id is None or sample.container_id == container_id)
        ]

    def __len__(self):
        with self._lock:
            return len(self._samples)
