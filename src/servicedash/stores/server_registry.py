# src/servicedash/stores/server_registry.py
"""
Server registry: the source of truth for which servers to poll.
"""

import threading
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Iterable

import yaml

from ..errors import NotFoundError, PersistenceError
from ..models import ManagedServer, ServerStatus


class ServerRegistry(ABC):
    """Read access to the managed server fleet"""

    @abstractmethod
    def list_servers(self, status: Optional[ServerStatus] = None) -> List[ManagedServer]:
        pass

    @abstractmethod
    def get_server(self, server_id: str) -> Optional[ManagedServer]:
        pass


class StaticServerRegistry(ServerRegistry):
    """In-memory registry, typically fed by a health-check process"""

    def __init__(self, servers: Iterable[ManagedServer] = ()):
        self._lock = threading.Lock()
        self._servers: Dict[str, ManagedServer] = {}
        self.logger = logging.getLogger('server_registry')
        self._replace_all(servers)

    def _replace_all(self, servers: Iterable[ManagedServer]):
        with self._lock:
            self._servers = {server.id: server for server in servers}

    def list_servers(self, status: Optional[ServerStatus] = None) -> List[ManagedServer]:
        with self._lock:
            servers = list(self._servers.values())
        if status is not None:
            servers = [server for server in servers if server.status == status]
        return servers

    def get_server(self, server_id: str) -> Optional[ManagedServer]:
        with self._lock:
            return self._servers.get(str(server_id))

    def add_server(self, server: ManagedServer):
        with self._lock:
            self._servers[server.id] = server

    def set_status(self, server_id: str, status: ServerStatus):
        """Record a health-check verdict for a server"""
        with self._lock:
            server = self._servers.get(str(server_id))
            if server is None:
                raise NotFoundError('Server', server_id)
            server.status = ServerStatus(status)
        self.logger.debug(f"Server {server_id} status set to {status.value}")


class YamlServerRegistry(StaticServerRegistry):
    """
    Registry loaded from a YAML file of the form:

        servers:
          - id: "1"
            name: web-01
            host_address: 10.0.0.10
            status: Online
    """

    def __init__(self, servers_file: str):
        self.servers_file = Path(servers_file)
        super().__init__()
        self.reload()

    def reload(self):
        """Re-read the servers file"""
        if not self.servers_file.exists():
            self.logger.warning(f"Servers file not found: {self.servers_file}")
            self._replace_all([])
            return

        try:
            with open(self.servers_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(f"Failed to read servers file {self.servers_file}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Servers file {self.servers_file} must contain a mapping")

        servers = []
        for entry in data.get('servers', []) or []:
            if not isinstance(entry, dict):
                self.logger.error(f"Invalid server entry {entry!r}: expected a mapping")
                continue
            try:
                servers.append(ManagedServer(**entry))
            except (TypeError, ValueError) as e:
                self.logger.error(f"Invalid server entry {entry.get('name', '?')}: {e}")
                continue

        self._replace_all(servers)
        self.logger.info(f"Loaded {len(servers)} servers from {self.servers_file}")
