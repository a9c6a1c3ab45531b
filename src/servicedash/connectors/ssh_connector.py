# src/servicedash/connectors/ssh_connector.py
"""
SSH connector for remote command execution.
Opens one paramiko session per command and always closes it.
"""

import paramiko
import socket
import time
from abc import ABC, abstractmethod
from pathlib import Path
import logging

from ..errors import ConnectError, CommandTimeout
from ..models import AuthMethod, CommandResult, ConnectionInfo


class SSHConnector:
    """
    Thin wrapper around paramiko.SSHClient for a single host.
    Supports key-based and password authentication.
    """

    def __init__(self, connection_info: ConnectionInfo, connect_timeout: float = 30):
        self.info = connection_info
        self.connect_timeout = connect_timeout

        self.client = None
        self.logger = logging.getLogger(f'ssh_connector.{connection_info.host}')

    def connect(self):
        """
        Establish the SSH connection.

        Raises:
            ConnectError: host unreachable, handshake or authentication failure
        """
        info = self.info
        connect_params = {
            'hostname': info.host,
            'port': info.port,
            'username': info.username,
            'timeout': self.connect_timeout,
            'banner_timeout': self.connect_timeout,
            'auth_timeout': self.connect_timeout,
            'allow_agent': False,
            'look_for_keys': False
        }

        if info.auth_kind == AuthMethod.PRIVATE_KEY:
            key_path = Path(info.secret)
            if not info.secret or not key_path.exists():
                raise ConnectError(info.host, info.port, f"SSH key not found: {info.secret}")
            connect_params['key_filename'] = str(key_path)
            self.logger.debug(f"Using SSH key: {key_path}")
        else:
            connect_params['password'] = info.secret

        self.client = paramiko.SSHClient()
        self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            self.client.connect(**connect_params)
        except paramiko.AuthenticationException as e:
            self.disconnect()
            self.logger.error(f"Authentication failed for {info.username}@{info.host}")
            raise ConnectError(info.host, info.port, f"authentication failed: {e}") from e
        except socket.timeout as e:
            self.disconnect()
            self.logger.error(f"Connection timeout to {info.host}:{info.port}")
            raise ConnectError(info.host, info.port, "connection timed out") from e
        except (paramiko.SSHException, OSError) as e:
            self.disconnect()
            self.logger.error(f"SSH connection failed to {info.host}:{info.port}: {e}")
            raise ConnectError(info.host, info.port, str(e)) from e

        self.logger.debug(f"SSH connection established to {info.host}:{info.port}")

    def disconnect(self):
        """Close the SSH connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.logger.debug(f"SSH connection closed to {self.info.host}")

    def execute_command(self, command: str, timeout: float = 30) -> CommandResult:
        """
        Execute a command on the connected host.

        Args:
            command: Command to execute, passed to the remote shell as-is
            timeout: Seconds to wait for the command to produce its output

        Returns:
            CommandResult: output streams and exit status

        Raises:
            ConnectError: no session, or the session broke mid-command
            CommandTimeout: command did not finish within timeout
        """
        if not self.client:
            raise ConnectError(self.info.host, self.info.port, "no SSH connection established")

        start_time = time.time()
        self.logger.debug(f"Executing: {self._truncate_command(command)}")

        try:
            stdin, stdout, stderr = self.client.exec_command(command, timeout=timeout)
            stdin.close()

            output = stdout.read().decode('utf-8', errors='replace')
            error = stderr.read().decode('utf-8', errors='replace')
            exit_status = stdout.channel.recv_exit_status()

        except socket.timeout as e:
            execution_time = time.time() - start_time
            self.logger.error(
                f"Command '{self._truncate_command(command)}' timed out after "
                f"{execution_time:.2f}s (timeout: {timeout}s)")
            raise CommandTimeout(self.info.host, command, timeout) from e
        except paramiko.SSHException as e:
            self.logger.error(f"Command '{self._truncate_command(command)}' execution failed: {e}")
            raise ConnectError(self.info.host, self.info.port, f"session failed: {e}") from e

        execution_time = time.time() - start_time
        result = CommandResult(
            stdout=output,
            stderr=error,
            exit_status=exit_status,
            execution_time=execution_time,
            command=command
        )

        if result.success:
            self.logger.debug(
                f"Command '{self._truncate_command(command)}' completed in {execution_time:.2f}s")
        else:
            self.logger.warning(self._format_command_error(result))

        return result

    def _truncate_command(self, command: str, max_length: int = 80) -> str:
        """Truncate command for logging if it's too long"""
        if len(command) <= max_length:
            return command
        return command[:max_length - 3] + "..."

    def _format_command_error(self, result: CommandResult) -> str:
        """Format command error message with context"""
        exit_code_meanings = {
            1: "General error",
            125: "Docker daemon error",
            126: "Command not executable",
            127: "Command not found",
            130: "Script terminated by Ctrl+C"
        }

        meaning = exit_code_meanings.get(result.exit_status, "Unknown error")

        error_parts = [f"Command '{self._truncate_command(result.command)}' failed"]
        error_parts.append(f"exit code {result.exit_status} ({meaning})")
        error_parts.append(f"time {result.execution_time:.2f}s")

        if result.stderr.strip():
            # First line only
            error_parts.append(f"stderr: {result.stderr.strip().split(chr(10))[0]}")

        return " | ".join(error_parts)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


class CommandExecutor(ABC):
    """Runs a single command on a remote host"""

    @abstractmethod
    def execute(self, connection_info: ConnectionInfo, command: str, timeout: float = 30) -> CommandResult:
        pass


class RemoteCommandExecutor(CommandExecutor):
    """
    Executes one command per SSH session.

    No retries: the first failure is raised to the caller.
    """

    def __init__(self, connect_timeout: float = 30):
        self.connect_timeout = connect_timeout

    def execute(self, connection_info: ConnectionInfo, command: str, timeout: float = 30) -> CommandResult:
        with SSHConnector(connection_info, connect_timeout=self.connect_timeout) as ssh:
            return ssh.execute_command(command, timeout=timeout)
