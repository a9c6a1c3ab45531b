# src/servicedash/errors.py
"""
Exception hierarchy shared by the connectors, services and collectors.
"""


class ServiceDashError(Exception):
    """Base class for all servicedash errors"""
    pass


class NotFoundError(ServiceDashError):
    """Referenced server or connection id does not exist"""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} with ID {identifier} not found")


class ConnectError(ServiceDashError):
    """SSH handshake, authentication or transport failure"""

    def __init__(self, host: str, port: int, reason: str):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Failed to connect to {host}:{port}: {reason}")


class CommandTimeout(ServiceDashError):
    """Remote command exceeded its allotted time"""

    def __init__(self, host: str, command: str, timeout: float):
        self.host = host
        self.command = command
        self.timeout = timeout
        super().__init__(f"Command on {host} timed out after {timeout}s: {command}")


class RemoteCommandError(ServiceDashError):
    """Remote command ran but exited with a non-zero status"""

    def __init__(self, host: str, result):
        self.host = host
        self.result = result
        first_line = result.stderr.strip().split('\n')[0] if result.stderr.strip() else ''
        message = f"Command on {host} exited with status {result.exit_status}"
        if first_line:
            message += f": {first_line}"
        super().__init__(message)


class PersistenceError(ServiceDashError):
    """Store read, write or delete failure"""
    pass


class InvalidIdentifierError(ServiceDashError, ValueError):
    """Identifier is not safe to interpolate into a remote command"""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind}: {value!r}")
