# src/servicedash/services/connection_registry.py
"""
Durable store of SSH connection profiles.

The backing JSON file is read and rewritten under a single lock so two
concurrent mutations can never lose each other's update.
"""

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import List, Optional

from ..connectors.connection_resolver import connection_info_for_connection
from ..connectors.ssh_connector import CommandExecutor, RemoteCommandExecutor
from ..errors import NotFoundError, PersistenceError, ServiceDashError
from ..models import ServerConnection, ServerConnectionRequest, utc_now
from ..utils.secrets import encode_secret

TEST_COMMAND = "docker ps --format '{{.Names}}'"


class ConnectionRegistry:
    """CRUD and connectivity checks over ServerConnection records"""

    def __init__(self, connections_file: str, executor: CommandExecutor = None,
                 test_timeout: float = 30):
        self.connections_file = Path(connections_file)
        self.executor = executor or RemoteCommandExecutor()
        self.test_timeout = test_timeout
        self.logger = logging.getLogger('connection_registry')
        self._lock = threading.Lock()

        self.connections_file.parent.mkdir(parents=True, exist_ok=True)
        if not self.connections_file.exists():
            self._write_connections([])

    # Callers must hold self._lock for the two helpers below

    def _read_connections(self) -> List[ServerConnection]:
        try:
            with open(self.connections_file, 'r') as f:
                raw = json.load(f)
            return [ServerConnection.from_dict(entry) for entry in raw]
        except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to read server connections from {self.connections_file}: {e}")
            raise PersistenceError(f"Cannot read {self.connections_file}: {e}") from e

    def _write_connections(self, connections: List[ServerConnection]):
        temp_file = self.connections_file.with_suffix(self.connections_file.suffix + '.tmp')
        try:
            with open(temp_file, 'w') as f:
                json.dump([c.to_dict() for c in connections], f, indent=2)
            temp_file.replace(self.connections_file)
        except OSError as e:
            self.logger.error(f"Failed to write server connections to {self.connections_file}: {e}")
            raise PersistenceError(f"Cannot write {self.connections_file}: {e}") from e

    def get_all_connections(self) -> List[ServerConnection]:
        with self._lock:
            return self._read_connections()

    def get_connection(self, connection_id: str) -> Optional[ServerConnection]:
        for connection in self.get_all_connections():
            if connection.id == connection_id:
                return connection
        return None

    def add_connection(self, request: ServerConnectionRequest) -> ServerConnection:
        """
        Register a new connection.

        Raises:
            ValueError: if the secret required by the auth method is missing
            PersistenceError: if the backing file cannot be read or written
        """
        new_connection = ServerConnection(
            id=str(uuid.uuid4()),
            name=request.name,
            host=request.host,
            port=request.port,
            username=request.username,
            auth_method=request.auth_method,
            password=encode_secret(request.password or ''),
            private_key_path=request.private_key_path or '',
            docker_endpoint=request.docker_endpoint,
            last_connected=utc_now()
        )

        with self._lock:
            connections = self._read_connections()
            connections.append(new_connection)
            self._write_connections(connections)

        self.logger.info(f"Added server connection {new_connection.name} ({new_connection.id})")
        return new_connection

    def update_connection(self, connection_id: str, request: ServerConnectionRequest) -> ServerConnection:
        """
        Update an existing connection. Password and key path are only
        replaced when the request provides them.

        Raises:
            NotFoundError: if the id is unknown
        """
        with self._lock:
            connections = self._read_connections()
            existing = next((c for c in connections if c.id == connection_id), None)
            if existing is None:
                raise NotFoundError('Server connection', connection_id)

            existing.name = request.name
            existing.host = request.host
            existing.port = request.port
            existing.username = request.username
            existing.auth_method = request.auth_method
            if request.password:
                existing.password = encode_secret(request.password)
            if request.private_key_path:
                existing.private_key_path = request.private_key_path
            existing.docker_endpoint = request.docker_endpoint
            existing.normalize_secret()

            self._write_connections(connections)

        self.logger.info(f"Updated server connection {existing.name} ({connection_id})")
        return existing

    def delete_connection(self, connection_id: str) -> bool:
        with self._lock:
            connections = self._read_connections()
            remaining = [c for c in connections if c.id != connection_id]
            if len(remaining) == len(connections):
                return False
            self._write_connections(remaining)

        self.logger.info(f"Deleted server connection {connection_id}")
        return True

    def mark_connected(self, connection_id: str) -> Optional[ServerConnection]:
        """Stamp last_connected on a connection after a successful check"""
        with self._lock:
            connections = self._read_connections()
            existing = next((c for c in connections if c.id == connection_id), None)
            if existing is None:
                return None
            existing.last_connected = utc_now()
            self._write_connections(connections)
        return existing

    def test_connection(self, connection_id: str) -> bool:
        """Check a stored connection; unknown ids report False"""
        connection = self.get_connection(connection_id)
        if connection is None:
            self.logger.warning(f"Cannot test unknown server connection {connection_id}")
            return False

        if not self._test_ssh(connection):
            return False

        self.mark_connected(connection_id)
        return True

    def test_connection_details(self, request: ServerConnectionRequest) -> bool:
        """Check connection details before they are saved"""
        try:
            connection = ServerConnection(
                id='',
                name=request.name,
                host=request.host,
                port=request.port,
                username=request.username,
                auth_method=request.auth_method,
                password=encode_secret(request.password or ''),
                private_key_path=request.private_key_path or ''
            )
        except ValueError as e:
            self.logger.error(f"Invalid connection details for {request.host}: {e}")
            return False

        return self._test_ssh(connection)

    def _test_ssh(self, connection: ServerConnection) -> bool:
        """Success means the command ran, regardless of how many containers exist"""
        try:
            self.executor.execute(connection_info_for_connection(connection), TEST_COMMAND,
                                  timeout=self.test_timeout)
            return True
        except ServiceDashError as e:
            self.logger.error(
                f"Failed to connect to server {connection.name} at "
                f"{connection.host}:{connection.port}: {e}")
            return False
