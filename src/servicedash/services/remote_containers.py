# src/servicedash/services/remote_containers.py
"""
Container operations on remote servers: list, logs, stats and lifecycle.
Each call resolves the connection, runs one Docker command over SSH and
parses the output. Nothing here is persisted.
"""

import logging
from typing import List

from ..connectors.connection_resolver import ConnectionResolver
from ..connectors.ssh_connector import CommandExecutor
from ..errors import RemoteCommandError, ServiceDashError
from ..models import CommandResult, ContainerStats, RemoteContainer
from ..parsers.docker_output import (
    CONTAINER_LIST_FORMAT,
    CONTAINER_STATS_FORMAT,
    parse_container_list,
    parse_container_stats_line
)
from ..utils.validation import validate_container_id, validate_line_count


class RemoteContainerService:
    """Docker container operations executed over SSH"""

    def __init__(self, resolver: ConnectionResolver, executor: CommandExecutor,
                 command_timeout: float = 30):
        self.resolver = resolver
        self.executor = executor
        self.command_timeout = command_timeout
        self.logger = logging.getLogger('remote_containers')

    def _run(self, server_id: str, command: str, action: str) -> CommandResult:
        """
        Resolve and execute, raising on any failure including non-zero exit.
        NotFoundError from the resolver is not logged here; it is the
        caller's problem.
        """
        connection_info = self.resolver.resolve(server_id)
        server_name = self.resolver.describe(server_id)

        try:
            result = self.executor.execute(connection_info, command, timeout=self.command_timeout)
            if not result.success:
                raise RemoteCommandError(connection_info.host, result)
            return result
        except ServiceDashError as e:
            self.logger.error(f"Failed to {action} on server {server_name}: {e}")
            raise

    def list_containers(self, server_id: str) -> List[RemoteContainer]:
        """All containers on the server, running or not"""
        command = f'docker ps -a --format "{CONTAINER_LIST_FORMAT}"'
        result = self._run(server_id, command, 'list containers')
        return parse_container_list(result.stdout, str(server_id))

    def get_container_logs(self, server_id: str, container_id: str, lines: int = 100) -> str:
        """Last `lines` lines of the container log, stdout and stderr merged"""
        validate_container_id(container_id)
        validate_line_count(lines)
        command = f'docker logs --tail {lines} {container_id} 2>&1'
        result = self._run(server_id, command, f'get logs for container {container_id}')
        return result.stdout

    def download_container_logs(self, server_id: str, container_id: str) -> str:
        """Full container log"""
        validate_container_id(container_id)
        command = f'docker logs {container_id} 2>&1'
        result = self._run(server_id, command, f'download logs for container {container_id}')
        return result.stdout

    def get_container_stats(self, server_id: str, container_id: str) -> ContainerStats:
        validate_container_id(container_id)
        command = f'docker stats {container_id} --no-stream --format "{CONTAINER_STATS_FORMAT}"'
        result = self._run(server_id, command, f'get stats for container {container_id}')
        return parse_container_stats_line(result.stdout, container_id)

    def start_container(self, server_id: str, container_id: str) -> bool:
        return self._lifecycle(server_id, container_id, 'start')

    def stop_container(self, server_id: str, container_id: str) -> bool:
        return self._lifecycle(server_id, container_id, 'stop')

    def restart_container(self, server_id: str, container_id: str) -> bool:
        return self._lifecycle(server_id, container_id, 'restart')

    def _lifecycle(self, server_id: str, container_id: str, action: str) -> bool:
        """
        Run docker start/stop/restart. Remote failures are logged and
        reported as False; an unknown server or bad container id still raises.
        """
        validate_container_id(container_id)
        connection_info = self.resolver.resolve(server_id)
        server_name = self.resolver.describe(server_id)

        try:
            result = self.executor.execute(connection_info, f'docker {action} {container_id}',
                                           timeout=self.command_timeout)
        except ServiceDashError as e:
            self.logger.error(
                f"Failed to {action} container {container_id} on server "
                f"{server_name}: {e}")
            return False

        if not result.success:
            self.logger.error(
                f"Failed to {action} container {container_id} on server "
                f"{server_name}: exit status {result.exit_status}: "
                f"{result.stderr.strip()}")
            return False

        self.logger.info(f"Container {container_id} {action} requested on server {server_name}")
        return True
