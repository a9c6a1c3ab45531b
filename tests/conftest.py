"""
Shared fixtures: a scriptable command executor and sample fleet data.
"""

import threading
from datetime import datetime, timezone

import pytest

from servicedash.connectors.ssh_connector import CommandExecutor
from servicedash.models import CommandResult, ManagedServer, ServerStatus
from servicedash.stores.metrics_store import InMemoryMetricsStore
from servicedash.stores.server_registry import StaticServerRegistry

FLEET_OUTPUT = (
    "a1b2c3d4e5f6|web|12.5%|1.5GiB / 8GiB|18.75%|10.5MB / 20MB|100MB / 50MB\n"
    "0f9e8d7c6b5a|db|3.2%|500MiB / 2GiB|24.41%|1kB / 2kB|0B / 0B\n"
)


class FakeExecutor(CommandExecutor):
    """
    Executor that answers from a per-host script.

    A script entry is either a CommandResult, a string (stdout, exit 0),
    an exception instance to raise, or a callable taking (info, command).
    """

    def __init__(self, responses=None, default=""):
        self.responses = dict(responses or {})
        self.default = default
        self.calls = []
        self._lock = threading.Lock()

    def execute(self, connection_info, command, timeout=30):
        with self._lock:
            self.calls.append((connection_info, command, timeout))

        response = self.responses.get(connection_info.host, self.default)
        if callable(response) and not isinstance(response, CommandResult):
            response = response(connection_info, command)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, CommandResult):
            return response
        return CommandResult(stdout=response, exit_status=0, command=command)

    @property
    def commands(self):
        return [command for _, command, _ in self.calls]


@pytest.fixture
def fixed_now():
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture
def metrics_store():
    return InMemoryMetricsStore()


@pytest.fixture
def fleet():
    """Three online servers and one offline"""
    return [
        ManagedServer(id='1', name='alpha', host_address='10.0.0.1', status=ServerStatus.ONLINE),
        ManagedServer(id='2', name='bravo', host_address='10.0.0.2', status=ServerStatus.ONLINE),
        ManagedServer(id='3', name='charlie', host_address='10.0.0.3', status=ServerStatus.ONLINE),
        ManagedServer(id='4', name='delta', host_address='10.0.0.4', status=ServerStatus.OFFLINE),
    ]


@pytest.fixture
def server_registry(fleet):
    return StaticServerRegistry(fleet)


@pytest.fixture
def fleet_output():
    return FLEET_OUTPUT


@pytest.fixture
def make_executor():
    """Factory for FakeExecutor instances with a custom script"""
    return FakeExecutor
