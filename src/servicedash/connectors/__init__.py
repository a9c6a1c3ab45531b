"""
Remote access: SSH command execution and connection resolution
"""

from .ssh_connector import SSHConnector, CommandExecutor, RemoteCommandExecutor
from .connection_resolver import ConnectionResolver, connection_info_for_connection, connection_info_for_server

__all__ = [
    'SSHConnector',
    'CommandExecutor',
    'RemoteCommandExecutor',
    'ConnectionResolver',
    'connection_info_for_connection',
    'connection_info_for_server'
]
