"""
Tests for configuration loading and the YAML server registry.
"""

import pytest
import yaml

from servicedash.config.settings import ConfigManager, MetricsConfig, SSHConfig, initialize_config, get_config
from servicedash.errors import NotFoundError, PersistenceError
from servicedash.models import ServerStatus, ServerType
from servicedash.stores.server_registry import StaticServerRegistry, YamlServerRegistry


class TestConfigManager:
    """Tests for servicedash.yml handling"""

    def test_defaults(self, tmp_path):
        config_file = tmp_path / 'servicedash.yml'
        config_file.write_text('')

        config = ConfigManager(str(config_file))

        assert config.metrics.collection_interval == 30
        assert config.metrics.retention_hours == 24
        assert config.metrics.startup_delay == 10
        assert config.metrics.max_concurrency == 5
        assert config.ssh.default_port == 22
        assert config.storage.connections_file == 'data/server-connections.json'
        assert config.logging.level == 'INFO'

    def test_overrides(self, tmp_path):
        config_file = tmp_path / 'servicedash.yml'
        config_file.write_text(yaml.dump({
            'metrics': {'collection_interval': 60, 'max_concurrency': 2},
            'ssh': {'default_username': 'admin'},
            'logging': {'level': 'DEBUG', 'log_to_file': False}
        }))

        config = ConfigManager(str(config_file))

        assert config.metrics.collection_interval == 60
        assert config.metrics.max_concurrency == 2
        assert config.metrics.retention_hours == 24
        assert config.ssh.default_username == 'admin'
        assert config.logging.log_to_file is False
        assert config.to_dict()['metrics']['collection_interval'] == 60

    def test_unknown_key_fails(self, tmp_path):
        config_file = tmp_path / 'servicedash.yml'
        config_file.write_text(yaml.dump({'metrics': {'interval_seconds': 5}}))

        with pytest.raises(TypeError):
            ConfigManager(str(config_file))

    def test_reload(self, tmp_path):
        config_file = tmp_path / 'servicedash.yml'
        config_file.write_text('')
        config = ConfigManager(str(config_file))

        config_file.write_text(yaml.dump({'metrics': {'retention_hours': 48}}))
        config.reload_config()

        assert config.metrics.retention_hours == 48

    def test_creates_default_file_when_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv('HOME', str(tmp_path))

        config = ConfigManager()

        assert (tmp_path / 'config' / 'servicedash.yml').exists()
        assert config.metrics.collection_interval == 30

    def test_global_instance(self, tmp_path):
        config_file = tmp_path / 'servicedash.yml'
        config_file.write_text('')

        config = initialize_config(str(config_file))

        assert get_config() is config


class TestSettingsValidation:
    """Tests for dataclass validation"""

    @pytest.mark.parametrize("field,value", [
        ('collection_interval', 0),
        ('retention_hours', -1),
        ('startup_delay', -0.5),
        ('max_concurrency', 0),
        ('command_timeout', 0),
    ])
    def test_metrics_rejects_bad_values(self, field, value):
        with pytest.raises(ValueError):
            MetricsConfig(**{field: value})

    def test_zero_startup_delay_allowed(self):
        assert MetricsConfig(startup_delay=0).startup_delay == 0

    def test_ssh_rejects_bad_timeout(self):
        with pytest.raises(ValueError):
            SSHConfig(connect_timeout=0)


class TestServerRegistry:
    """Tests for server registries"""

    def test_yaml_registry(self, tmp_path):
        servers_file = tmp_path / 'servers.yml'
        servers_file.write_text(yaml.dump({'servers': [
            {'id': 1, 'name': 'web-01', 'host_address': '10.0.0.10', 'status': 'Online'},
            {'id': '2', 'name': 'pi', 'host_address': '10.0.0.11', 'status': 'Offline',
             'server_type': 'RaspberryPi'},
            {'id': '3', 'name': 'broken', 'host_address': '10.0.0.12', 'status': 'Sideways'},
        ]}))

        registry = YamlServerRegistry(str(servers_file))

        assert sorted(s.id for s in registry.list_servers()) == ['1', '2']
        assert [s.name for s in registry.list_servers(status=ServerStatus.ONLINE)] == ['web-01']
        assert registry.get_server('2').server_type == ServerType.RASPBERRY_PI
        assert registry.get_server(1).name == 'web-01'

    def test_non_mapping_entry_is_skipped(self, tmp_path):
        servers_file = tmp_path / 'servers.yml'
        servers_file.write_text(
            "servers:\n"
            "  - just-a-string\n"
            "  - 42\n"
            "  - id: '1'\n"
            "    name: web-01\n"
            "    host_address: 10.0.0.10\n"
        )

        registry = YamlServerRegistry(str(servers_file))

        assert [s.name for s in registry.list_servers()] == ['web-01']

    def test_top_level_list_raises(self, tmp_path):
        servers_file = tmp_path / 'servers.yml'
        servers_file.write_text("- id: '1'\n")

        with pytest.raises(PersistenceError):
            YamlServerRegistry(str(servers_file))

    def test_missing_file_is_empty(self, tmp_path):
        registry = YamlServerRegistry(str(tmp_path / 'missing.yml'))
        assert registry.list_servers() == []

    def test_invalid_yaml_raises(self, tmp_path):
        servers_file = tmp_path / 'servers.yml'
        servers_file.write_text('servers: [unclosed')

        with pytest.raises(PersistenceError):
            YamlServerRegistry(str(servers_file))

    def test_set_status(self, server_registry):
        server_registry.set_status('4', ServerStatus.ONLINE)

        assert len(server_registry.list_servers(status=ServerStatus.ONLINE)) == 4

    def test_set_status_unknown(self):
        with pytest.raises(NotFoundError):
            StaticServerRegistry().set_status('x', ServerStatus.ONLINE)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
