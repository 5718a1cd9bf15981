"""
Tests for the CLI interface.
"""
import os
import tempfile

import pytest
import yaml
from typer.testing import CliRunner

from llm_meter.cache.disk import DiskCache
from llm_meter.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL

runner = CliRunner()


@pytest.fixture
def cache_dir():
    """Create a temporary cache directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def populated_cache(cache_dir):
    """Create a disk cache holding three entries."""
    cache = DiskCache(cache_dir=cache_dir)
    for key in ("a", "b", "c"):
        cache.set(key, {"response": key})
    return cache


class TestCLI:
    """Test CLI commands."""

    def test_no_command_prints_hint(self):
        """Test bare invocation prints usage hint."""
        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_CODE_PASS
        assert "--help" in result.output

    def test_check_config_valid(self, cache_dir):
        """Test a valid config is summarized."""
        config_path = os.path.join(cache_dir, "meter.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump({
                "cache": {"backend": "bounded-memory", "max_entries": 50},
                "budget": {"max_cost_usd": 2.5}
            }, f)

        result = runner.invoke(app, ["check-config", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "bounded-memory" in result.output
        assert "2.5" in result.output
        assert "Configuration is valid" in result.output

    def test_check_config_invalid(self, cache_dir):
        """Test an invalid config fails with exit code 1."""
        config_path = os.path.join(cache_dir, "meter.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump({"cache": {"backend": "redis"}}, f)

        result = runner.invoke(app, ["check-config", config_path])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Invalid configuration" in result.output

    def test_check_config_missing_file(self):
        """Test a missing config file fails."""
        result = runner.invoke(app, ["check-config", "does-not-exist.yaml"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_cache_info(self, populated_cache, cache_dir):
        """Test cache-info reports the entry count."""
        result = runner.invoke(app, ["cache-info", "--dir", cache_dir])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Entries" in result.output
        assert "3" in result.output

    def test_cache_info_empty(self, cache_dir):
        """Test cache-info on an empty directory."""
        result = runner.invoke(app, ["cache-info", "--dir", cache_dir])
        assert result.exit_code == EXIT_CODE_PASS
        assert "0 B" in result.output

    def test_cache_prune_max_entries(self, populated_cache, cache_dir):
        """Test cache-prune trims to the requested size."""
        result = runner.invoke(app, ["cache-prune", "--dir", cache_dir, "--max-entries", "1"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Pruned 2 entries" in result.output
        assert len(populated_cache) == 1

    def test_cache_prune_requires_a_bound(self, cache_dir):
        """Test cache-prune without bounds fails."""
        result = runner.invoke(app, ["cache-prune", "--dir", cache_dir])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_cache_prune_rejects_negative(self, cache_dir):
        """Test negative bounds fail cleanly."""
        result = runner.invoke(app, ["cache-prune", "--dir", cache_dir, "--ttl-ms", "-1"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_cache_clear(self, populated_cache, cache_dir):
        """Test cache-clear deletes every entry."""
        result = runner.invoke(app, ["cache-clear", "--dir", cache_dir])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Deleted 3 entries" in result.output
        assert len(populated_cache) == 0
