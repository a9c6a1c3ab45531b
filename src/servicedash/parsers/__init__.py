"""
Parsers that turn Docker CLI output into typed records
"""

from .docker_output import (
    parse_percentage,
    parse_size_to_bytes,
    parse_size_pair,
    parse_container_list,
    parse_container_stats_line,
    parse_fleet_stats
)

__all__ = [
    'parse_percentage',
    'parse_size_to_bytes',
    'parse_size_pair',
    'parse_container_list',
    'parse_container_stats_line',
    'parse_fleet_stats'
]
