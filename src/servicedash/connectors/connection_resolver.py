# src/servicedash/connectors/connection_resolver.py
"""
Resolves a server or connection id into SSH connection details.
"""

import logging
from pathlib import Path

from ..errors import NotFoundError
from ..models import AuthMethod, ConnectionInfo, ManagedServer, ServerConnection
from ..utils.secrets import decode_secret

logger = logging.getLogger('connection_resolver')


def connection_info_for_connection(connection: ServerConnection) -> ConnectionInfo:
    """Build connection details from a registered connection profile"""
    if connection.auth_method == AuthMethod.PRIVATE_KEY and connection.private_key_path:
        return ConnectionInfo(
            host=connection.host,
            port=connection.port,
            username=connection.username,
            secret=connection.private_key_path,
            auth_kind=AuthMethod.PRIVATE_KEY
        )

    return ConnectionInfo(
        host=connection.host,
        port=connection.port,
        username=connection.username,
        secret=decode_secret(connection.password),
        auth_kind=AuthMethod.PASSWORD
    )


def connection_info_for_server(server: ManagedServer, default_username: str = 'root',
                               default_port: int = 22) -> ConnectionInfo:
    """
    Build connection details from a managed server record.
    Key auth is used only when the key file exists on this host.
    """
    host = server.host_address
    port = server.ssh_port or default_port
    username = server.username or default_username

    if server.ssh_key_path and Path(server.ssh_key_path).exists():
        return ConnectionInfo(host=host, port=port, username=username,
                              secret=server.ssh_key_path, auth_kind=AuthMethod.PRIVATE_KEY)

    return ConnectionInfo(host=host, port=port, username=username,
                          secret=decode_secret(server.encrypted_password or ''),
                          auth_kind=AuthMethod.PASSWORD)


class ConnectionResolver:
    """
    Looks up an id in the connection registry first, then in the managed
    server registry.
    """

    def __init__(self, connection_registry=None, server_registry=None,
                 default_username: str = 'root', default_port: int = 22):
        self.connection_registry = connection_registry
        self.server_registry = server_registry
        self.default_username = default_username
        self.default_port = default_port

    def resolve(self, server_id: str) -> ConnectionInfo:
        """
        Args:
            server_id: Connection id or managed server id

        Returns:
            ConnectionInfo with a decoded secret

        Raises:
            NotFoundError: if no connection or server has this id
        """
        server_id = str(server_id)

        if self.connection_registry is not None:
            connection = self.connection_registry.get_connection(server_id)
            if connection is not None:
                logger.debug(f"Resolved {server_id} to connection {connection.name}")
                return connection_info_for_connection(connection)

        if self.server_registry is not None:
            server = self.server_registry.get_server(server_id)
            if server is not None:
                logger.debug(f"Resolved {server_id} to managed server {server.name}")
                return connection_info_for_server(server, self.default_username, self.default_port)

        raise NotFoundError('Server connection', server_id)

    def describe(self, server_id: str) -> str:
        """Human-readable name for log messages; falls back to the id"""
        server_id = str(server_id)
        if self.connection_registry is not None:
            connection = self.connection_registry.get_connection(server_id)
            if connection is not None:
                return connection.name
        if self.server_registry is not None:
            server = self.server_registry.get_server(server_id)
            if server is not None:
                return server.name
        return server_id
