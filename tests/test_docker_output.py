"""
Tests for Docker CLI output parsers.
"""

import pytest

from servicedash.parsers.docker_output import (
    parse_container_list,
    parse_container_stats_line,
    parse_fleet_stats,
    parse_percentage,
    parse_size_pair,
    parse_size_to_bytes
)


class TestParsePercentage:
    """Tests for percentage fields"""

    def test_parses_trailing_percent(self):
        assert parse_percentage("45.2%") == pytest.approx(45.2)

    def test_tolerates_whitespace(self):
        assert parse_percentage("  0.50 % ") == pytest.approx(0.5)

    def test_without_percent_sign(self):
        assert parse_percentage("7") == 7.0

    @pytest.mark.parametrize("text", ["notapercent", "", "--", None, "%", "nan%", "inf%", "-inf", "NaN"])
    def test_unparsable_yields_zero(self, text):
        assert parse_percentage(text) == 0.0


class TestParseSizeToBytes:
    """Tests for human-readable size conversion"""

    @pytest.mark.parametrize("text,expected", [
        ("50B", 50),
        ("1KB", 1024),
        ("1kB", 1024),
        ("2KiB", 2048),
        ("500MiB", 500 * 1024 ** 2),
        ("10.5MB", int(10.5 * 1024 ** 2)),
        ("1.5GiB", 1610612736),
        ("8GiB", 8589934592),
        ("1TB", 1024 ** 4),
        ("2TiB", 2 * 1024 ** 4),
        ("3 MiB", 3 * 1024 ** 2),
    ])
    def test_known_units(self, text, expected):
        assert parse_size_to_bytes(text) == expected

    @pytest.mark.parametrize("text", ["", None, "N/A", "12", "5PB", "abcMiB", "1.2.3GiB", "GiB"])
    def test_unparsable_yields_zero(self, text):
        assert parse_size_to_bytes(text) == 0


class TestParseSizePair:
    """Tests for 'used / limit' style fields"""

    def test_memory_usage_and_limit(self):
        assert parse_size_pair("1.5GiB / 8GiB") == (1610612736, 8589934592)

    def test_single_part_yields_zeros(self):
        assert parse_size_pair("1.5GiB") == (0, 0)

    def test_one_bad_side_keeps_other(self):
        assert parse_size_pair("garbage / 2KiB") == (0, 2048)


class TestParseContainerList:
    """Tests for docker ps output"""

    def test_rows_preserve_field_order(self):
        output = (
            "a1b2c3|web|Up 2 hours|nginx:latest\n"
            "d4e5f6|db|Exited (0) 3 days ago|postgres:16\n"
        )
        containers = parse_container_list(output, "srv-1")

        assert [c.id for c in containers] == ["a1b2c3", "d4e5f6"]
        assert containers[0].name == "web"
        assert containers[0].status == "Up 2 hours"
        assert containers[0].image == "nginx:latest"
        assert all(c.server_id == "srv-1" for c in containers)

    def test_short_rows_are_dropped(self):
        output = (
            "a1b2c3|web|Up 2 hours|nginx:latest\n"
            "broken|row\n"
            "\n"
            "d4e5f6|db|Up 1 minute|postgres:16|extra\n"
        )
        containers = parse_container_list(output, "srv-1")

        assert [c.name for c in containers] == ["web", "db"]

    def test_empty_output(self):
        assert parse_container_list("", "srv-1") == []


class TestParseContainerStatsLine:
    """Tests for single-container docker stats output"""

    def test_full_line(self):
        stats = parse_container_stats_line(
            "12.34%|100MiB / 1GiB|9.77%|1.2kB / 648B|0B / 4.1kB\n", "abc123")

        assert stats.container_id == "abc123"
        assert stats.cpu_percentage == pytest.approx(12.34)
        assert stats.memory_usage == "100MiB / 1GiB"
        assert stats.memory_percentage == pytest.approx(9.77)
        assert stats.network_io == "1.2kB / 648B"
        assert stats.block_io == "0B / 4.1kB"

    def test_short_line_gives_empty_stats(self):
        stats = parse_container_stats_line("Error: no such container", "abc123")

        assert stats.container_id == "abc123"
        assert stats.cpu_percentage == 0.0
        assert stats.memory_usage == ""
        assert stats.timestamp is not None


class TestParseFleetStats:
    """Tests for fleet-wide docker stats output"""

    def test_rows_share_timestamp(self, fixed_now, fleet_output):
        samples = parse_fleet_stats(fleet_output, "srv-1", fixed_now)

        assert len(samples) == 2
        assert {s.timestamp for s in samples} == {fixed_now}

        web = samples[0]
        assert web.server_id == "srv-1"
        assert web.container_id == "a1b2c3d4e5f6"
        assert web.container_name == "web"
        assert web.cpu_percentage == pytest.approx(12.5)
        assert web.memory_usage_bytes == 1610612736
        assert web.memory_limit_bytes == 8589934592
        assert web.memory_percentage == pytest.approx(18.75)
        assert web.network_rx_bytes == int(10.5 * 1024 ** 2)
        assert web.network_tx_bytes == 20 * 1024 ** 2
        assert web.block_read_bytes == 100 * 1024 ** 2
        assert web.block_write_bytes == 50 * 1024 ** 2

    def test_bad_field_zeroes_only_that_field(self, fixed_now):
        output = "abc|cache|n/a|256MiB / 1GiB|bogus|1kB / 1kB|0B / 0B"
        samples = parse_fleet_stats(output, "srv-1", fixed_now)

        assert len(samples) == 1
        assert samples[0].cpu_percentage == 0.0
        assert samples[0].memory_percentage == 0.0
        assert samples[0].memory_usage_bytes == 256 * 1024 ** 2

    def test_non_finite_percentages_become_zero(self, fixed_now):
        output = "abc|cache|nan%|256MiB / 1GiB|inf%|1kB / 1kB|0B / 0B"
        sample = parse_fleet_stats(output, "srv-1", fixed_now)[0]

        assert sample.cpu_percentage == 0.0
        assert sample.memory_percentage == 0.0

    def test_short_rows_do_not_drop_valid_rows(self, fixed_now, fleet_output):
        output = "partial|row|1%\n" + fleet_output
        samples = parse_fleet_stats(output, "srv-1", fixed_now)

        assert [s.container_name for s in samples] == ["web", "db"]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
