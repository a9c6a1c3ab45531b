# src/servicedash/cli.py
"""
Command line entry point: run the metrics collector or act on remote
containers and stored connections.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass

from .collectors.metrics_collector import MetricsCollector
from .config.settings import ConfigManager, initialize_config
from .connectors.connection_resolver import ConnectionResolver
from .connectors.ssh_connector import RemoteCommandExecutor
from .errors import NotFoundError, ServiceDashError
from .services.connection_registry import ConnectionRegistry
from .services.metrics_queries import MetricsQueryService
from .services.remote_containers import RemoteContainerService
from .stores.metrics_store import InMemoryMetricsStore
from .stores.server_registry import YamlServerRegistry
from .utils.logging_config import setup_logging_from_settings


@dataclass
class Application:
    """Wired-up components sharing one executor and one set of stores"""
    config: ConfigManager
    server_registry: YamlServerRegistry
    metrics_store: InMemoryMetricsStore
    connection_registry: ConnectionRegistry
    containers: RemoteContainerService
    collector: MetricsCollector
    metrics: MetricsQueryService


def build_application(config: ConfigManager) -> Application:
    """Construct every component from configuration"""
    executor = RemoteCommandExecutor(connect_timeout=config.ssh.connect_timeout)
    server_registry = YamlServerRegistry(config.storage.servers_file)
    metrics_store = InMemoryMetricsStore()
    connection_registry = ConnectionRegistry(config.storage.connections_file, executor,
                                             test_timeout=config.metrics.command_timeout)
    resolver = ConnectionResolver(connection_registry, server_registry,
                                  default_username=config.ssh.default_username,
                                  default_port=config.ssh.default_port)

    return Application(
        config=config,
        server_registry=server_registry,
        metrics_store=metrics_store,
        connection_registry=connection_registry,
        containers=RemoteContainerService(resolver, executor, config.metrics.command_timeout),
        collector=MetricsCollector(server_registry, metrics_store, executor,
                                   settings=config.metrics, ssh_settings=config.ssh),
        metrics=MetricsQueryService(metrics_store, server_registry)
    )


def run_collector(app: Application, logger):
    """Run the collection loop in the foreground until interrupted"""
    print("🚀 Starting container metrics collection (Ctrl+C to stop)")
    app.collector.start()
    try:
        while app.collector.is_running:
            app.collector.join(1.0)
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
        print("\n🛑 Stopping collector...")
    finally:
        app.collector.stop(timeout=app.config.metrics.command_timeout + 5)


def run_single_tick(app: Application):
    report = app.collector.run_once()
    print(json.dumps(report.to_dict(), indent=2))
    for result in report.results:
        if result.error:
            print(f"❌ {result.server_name}: {result.error}")
        else:
            print(f"✅ {result.server_name}: {len(result.samples)} containers")


def main(argv=None):
    """Main function with command line arguments"""
    parser = argparse.ArgumentParser(description='Remote Docker fleet dashboard core')
    parser.add_argument('--config', help='Path to servicedash.yml')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command')
    subparsers.add_parser('collect', help='Run the metrics collector until interrupted')
    subparsers.add_parser('collect-once', help='Run a single collection tick')

    containers_parser = subparsers.add_parser('containers', help='List containers on a server')
    containers_parser.add_argument('server_id')

    logs_parser = subparsers.add_parser('logs', help='Show container logs')
    logs_parser.add_argument('server_id')
    logs_parser.add_argument('container_id')
    logs_parser.add_argument('--lines', type=int, default=100)

    stats_parser = subparsers.add_parser('stats', help='Show live container stats')
    stats_parser.add_argument('server_id')
    stats_parser.add_argument('container_id')

    for action in ('start', 'stop', 'restart'):
        action_parser = subparsers.add_parser(action, help=f'{action.capitalize()} a container')
        action_parser.add_argument('server_id')
        action_parser.add_argument('container_id')

    test_parser = subparsers.add_parser('test-connection', help='Test a stored connection')
    test_parser.add_argument('connection_id')

    args = parser.parse_args(argv)

    config = initialize_config(args.config)
    setup_logging_from_settings(config.logging, enable_debug=args.debug)
    logger = logging.getLogger('servicedash')

    app = build_application(config)
    command = args.command or 'collect'

    try:
        if command == 'collect':
            run_collector(app, logger)
        elif command == 'collect-once':
            run_single_tick(app)
        elif command == 'containers':
            for container in app.containers.list_containers(args.server_id):
                print(f"{container.id}  {container.name:30}  {container.status:25}  {container.image}")
        elif command == 'logs':
            print(app.containers.get_container_logs(args.server_id, args.container_id, args.lines))
        elif command == 'stats':
            stats = app.containers.get_container_stats(args.server_id, args.container_id)
            print(f"CPU {stats.cpu_percentage}% | MEM {stats.memory_usage} ({stats.memory_percentage}%) | "
                  f"NET {stats.network_io} | BLOCK {stats.block_io}")
        elif command in ('start', 'stop', 'restart'):
            ok = getattr(app.containers, f'{command}_container')(args.server_id, args.container_id)
            print(f"✅ {command} requested" if ok else f"❌ {command} failed")
            return 0 if ok else 1
        elif command == 'test-connection':
            ok = app.connection_registry.test_connection(args.connection_id)
            print("✅ Connection successful" if ok else "❌ Connection failed")
            return 0 if ok else 1
    except NotFoundError as e:
        logger.error(str(e))
        print(f"❌ {e}")
        return 2
    except ServiceDashError as e:
        logger.error(f"{command} failed: {e}")
        print(f"❌ {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
