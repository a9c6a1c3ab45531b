# src/servicedash/parsers/docker_output.py
"""
Parsers for Docker CLI output collected over SSH.

Docker's table output is not stable across versions, so every parser here is
permissive: a bad field becomes zero and a short row is dropped, but neither
aborts the rest of the batch.
"""

import math
import re
from datetime import datetime
from typing import List, Optional, Tuple

from ..models import ContainerMetricSample, ContainerStats, RemoteContainer, utc_now

FIELD_DELIMITER = '|'

CONTAINER_LIST_FORMAT = '{{.ID}}|{{.Names}}|{{.Status}}|{{.Image}}'
CONTAINER_STATS_FORMAT = '{{.CPUPerc}}|{{.MemUsage}}|{{.MemPerc}}|{{.NetIO}}|{{.BlockIO}}'
FLEET_STATS_FORMAT = '{{.ID}}|{{.Name}}|{{.CPUPerc}}|{{.MemUsage}}|{{.MemPerc}}|{{.NetIO}}|{{.BlockIO}}'

CONTAINER_LIST_FIELDS = 4
CONTAINER_STATS_FIELDS = 5
FLEET_STATS_FIELDS = 7

SIZE_PATTERN = re.compile(r'^\s*([\d.]+)\s*([A-Za-z]+)\s*$')

SIZE_MULTIPLIERS = {
    'B': 1,
    'KB': 1024,
    'KIB': 1024,
    'MB': 1024 ** 2,
    'MIB': 1024 ** 2,
    'GB': 1024 ** 3,
    'GIB': 1024 ** 3,
    'TB': 1024 ** 4,
    'TIB': 1024 ** 4,
}


def _split_rows(output: str) -> List[List[str]]:
    rows = []
    for line in (output or '').split('\n'):
        line = line.strip()
        if not line:
            continue
        rows.append([part.strip() for part in line.split(FIELD_DELIMITER)])
    return rows


def parse_percentage(text: str) -> float:
    """Parse '45.2%' to 45.2; anything unparsable or non-finite is 0.0"""
    if not text:
        return 0.0
    try:
        value = float(text.strip().rstrip('%').strip())
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_size_to_bytes(text: str) -> int:
    """
    Convert a human size such as '1.5GiB', '500MiB', '100kB' or '50B' to bytes.

    Decimal and binary unit names both use 1024 multipliers, matching how
    the dashboard has always reported them. Unknown units, missing units and
    unparsable numbers yield 0.
    """
    if not text:
        return 0

    match = SIZE_PATTERN.match(text)
    if not match:
        return 0

    multiplier = SIZE_MULTIPLIERS.get(match.group(2).upper())
    if multiplier is None:
        return 0

    try:
        value = float(match.group(1))
    except ValueError:
        return 0

    return int(value * multiplier)


def parse_size_pair(text: str) -> Tuple[int, int]:
    """Parse 'used / limit' style fields; fewer than two parts gives (0, 0)"""
    parts = (text or '').split('/')
    if len(parts) < 2:
        return 0, 0
    return parse_size_to_bytes(parts[0]), parse_size_to_bytes(parts[1])


def parse_container_list(output: str, server_id: str) -> List[RemoteContainer]:
    """Parse `docker ps` rows in CONTAINER_LIST_FORMAT"""
    containers = []
    for parts in _split_rows(output):
        if len(parts) < CONTAINER_LIST_FIELDS:
            continue
        containers.append(RemoteContainer(
            id=parts[0],
            name=parts[1],
            status=parts[2],
            image=parts[3],
            server_id=server_id
        ))
    return containers


def parse_container_stats_line(output: str, container_id: str,
                               timestamp: Optional[datetime] = None) -> ContainerStats:
    """
    Parse single-container `docker stats` output in CONTAINER_STATS_FORMAT.
    Returns an empty ContainerStats when the line is short.
    """
    timestamp = timestamp or utc_now()
    parts = [part.strip() for part in (output or '').strip().split(FIELD_DELIMITER)]

    if len(parts) < CONTAINER_STATS_FIELDS:
        return ContainerStats(container_id=container_id, timestamp=timestamp)

    return ContainerStats(
        container_id=container_id,
        cpu_percentage=parse_percentage(parts[0]),
        memory_usage=parts[1],
        memory_percentage=parse_percentage(parts[2]),
        network_io=parts[3],
        block_io=parts[4],
        timestamp=timestamp
    )


def parse_fleet_stats(output: str, server_id: str, timestamp: datetime) -> List[ContainerMetricSample]:
    """
    Parse multi-container `docker stats` output in FLEET_STATS_FORMAT into
    samples that all carry the given collection timestamp.
    """
    samples = []
    for parts in _split_rows(output):
        if len(parts) < FLEET_STATS_FIELDS:
            continue

        memory_usage, memory_limit = parse_size_pair(parts[3])
        network_rx, network_tx = parse_size_pair(parts[5])
        block_read, block_write = parse_size_pair(parts[6])

        samples.append(ContainerMetricSample(
            server_id=server_id,
            container_id=parts[0],
            container_name=parts[1],
            timestamp=timestamp,
            cpu_percentage=parse_percentage(parts[2]),
            memory_usage_bytes=memory_usage,
            memory_limit_bytes=memory_limit,
            memory_percentage=parse_percentage(parts[4]),
            network_rx_bytes=network_rx,
            network_tx_bytes=network_tx,
            block_read_bytes=block_read,
            block_write_bytes=block_write
        ))
    return samples
