# src/servicedash/models.py
"""
Data model for servers, connections, containers and metrics.
"""

from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthMethod(str, Enum):
    PASSWORD = 'Password'
    PRIVATE_KEY = 'PrivateKey'


class ServerStatus(str, Enum):
    UNKNOWN = 'Unknown'
    ONLINE = 'Online'
    OFFLINE = 'Offline'
    WARNING = 'Warning'
    CRITICAL = 'Critical'
    MAINTENANCE = 'Maintenance'


class ServerType(str, Enum):
    SERVER = 'Server'
    RASPBERRY_PI = 'RaspberryPi'
    VIRTUAL_MACHINE = 'VirtualMachine'
    CONTAINER = 'Container'
    OTHER = 'Other'


@dataclass
class ConnectionInfo:
    """Resolved SSH connection details with a plaintext secret"""
    host: str
    port: int = 22
    username: str = 'root'
    secret: str = ''
    auth_kind: AuthMethod = AuthMethod.PASSWORD

    def __repr__(self):
        # Never leak the secret into logs
        return (f"ConnectionInfo(host={self.host!r}, port={self.port}, "
                f"username={self.username!r}, auth_kind={self.auth_kind.value})")


@dataclass
class CommandResult:
    """Result of one remote command execution"""
    stdout: str = ""
    stderr: str = ""
    exit_status: int = 0
    execution_time: float = 0.0
    command: str = ""

    @property
    def success(self) -> bool:
        return self.exit_status == 0


@dataclass
class ServerConnectionRequest:
    """Create/update payload for a server connection"""
    name: str
    host: str
    username: str
    port: int = 22
    auth_method: AuthMethod = AuthMethod.PASSWORD
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    docker_endpoint: str = 'unix:///var/run/docker.sock'


@dataclass
class ServerConnection:
    """
    Stored SSH connection profile.

    The password is kept encoded (see utils.secrets). Exactly one of
    password / private_key_path is populated, according to auth_method.
    """
    id: str
    name: str
    host: str
    username: str
    port: int = 22
    auth_method: AuthMethod = AuthMethod.PASSWORD
    password: str = ''
    private_key_path: str = ''
    docker_endpoint: str = 'unix:///var/run/docker.sock'
    last_connected: Optional[datetime] = None

    def __post_init__(self):
        self.auth_method = AuthMethod(self.auth_method)
        self.normalize_secret()

    def normalize_secret(self):
        """Clear the secret that does not belong to the auth method"""
        if self.auth_method == AuthMethod.PASSWORD:
            if not self.password:
                raise ValueError(f"Password required for connection {self.name}")
            self.private_key_path = ''
        else:
            if not self.private_key_path:
                raise ValueError(f"Private key path required for connection {self.name}")
            self.password = ''

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['auth_method'] = self.auth_method.value
        data['last_connected'] = self.last_connected.isoformat() if self.last_connected else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServerConnection':
        """Build from a stored record; keys this version does not know are ignored"""
        known = {f.name for f in fields(cls)}
        data = {key: value for key, value in data.items() if key in known}
        last_connected = data.get('last_connected')
        if last_connected:
            data['last_connected'] = datetime.fromisoformat(last_connected)
        return cls(**data)


@dataclass
class ManagedServer:
    """A supervised host; status is maintained by a separate health check"""
    id: str
    name: str
    host_address: str
    ssh_port: int = 22
    username: str = 'root'
    encrypted_password: Optional[str] = None
    ssh_key_path: Optional[str] = None
    status: ServerStatus = ServerStatus.UNKNOWN
    server_type: ServerType = ServerType.SERVER

    def __post_init__(self):
        self.id = str(self.id)
        self.status = ServerStatus(self.status)
        self.server_type = ServerType(self.server_type)


@dataclass(frozen=True)
class ContainerMetricSample:
    """Immutable per-container observation from one collection tick"""
    server_id: str
    container_id: str
    container_name: str
    timestamp: datetime
    cpu_percentage: float = 0.0
    memory_usage_bytes: int = 0
    memory_limit_bytes: int = 0
    memory_percentage: float = 0.0
    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    block_read_bytes: int = 0
    block_write_bytes: int = 0

    @property
    def key(self):
        return (self.server_id, self.container_id, self.timestamp)


@dataclass
class RemoteContainer:
    """Projection of one `docker ps` row"""
    id: str
    name: str
    status: str
    image: str
    server_id: str


@dataclass
class ContainerStats:
    """Point-in-time stats for a single container"""
    container_id: str
    cpu_percentage: float = 0.0
    memory_usage: str = ''
    memory_percentage: float = 0.0
    network_io: str = ''
    block_io: str = ''
    timestamp: datetime = field(default_factory=utc_now)
