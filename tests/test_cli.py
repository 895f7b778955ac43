"""Tests for sudohop CLI."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from sudohop.cli import CLIContext, cli
from sudohop.config import SudoHopConfig, TransportConfig


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config():
    """Create a config where only localhost is local."""
    return SudoHopConfig(transport=TransportConfig(local_host_pattern="^localhost$"))


@pytest.fixture(autouse=True)
def mock_load_config(config):
    """Keep tests independent of any sudohop.toml on disk."""
    with patch("sudohop.cli.load_config", return_value=config) as mock:
        yield mock


# =============================================================================
# CLI Context Tests
# =============================================================================


class TestCLIContext:
    """Tests for CLIContext class."""

    def test_context_creation(self, config):
        """CLIContext MUST initialize with config."""
        ctx = CLIContext(verbose=True)

        assert ctx.verbose is True
        assert ctx.config is config

    def test_syntax_override(self):
        """CLIContext MUST apply a syntax override."""
        ctx = CLIContext(syntax="separate")
        assert ctx.config.syntax.name == "separate"

    def test_composer_lazy_loading(self):
        """CLIContext MUST lazy-load the composer."""
        ctx = CLIContext()

        assert ctx._composer is None
        composer = ctx.composer
        assert ctx.composer is composer


# =============================================================================
# path command
# =============================================================================


class TestPathCommand:
    """Tests for the path command."""

    def test_local_file(self, runner):
        """path MUST print the elevated local address."""
        result = runner.invoke(cli, ["path", "/etc/hosts", "-u", "alice"])

        assert result.exit_code == 0
        assert result.output == "/sudo:alice@localhost:/etc/hosts\n"

    def test_default_user(self, runner):
        """path MUST use the configured default user."""
        result = runner.invoke(cli, ["path", "/etc/hosts"])

        assert result.exit_code == 0
        assert result.output == "/sudo:root@localhost:/etc/hosts\n"

    def test_remote_file(self, runner):
        """path MUST chain through the existing hop."""
        result = runner.invoke(cli, ["path", "/scp:bob@web#2222:/etc/hosts"])

        assert result.exit_code == 0
        assert result.output == "/ssh:bob@web#2222|sudo:root@web#2222:/etc/hosts\n"

    def test_json_output(self, runner):
        """path --json MUST print the descriptor fields."""
        result = runner.invoke(cli, ["path", "/ssh:bob@web:/x", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["path"] == "/ssh:bob@web|sudo:root@web:/x"
        assert data["descriptor"]["hop_chain"] == "ssh:bob@web|"
        assert data["descriptor"]["user"] == "root"

    def test_json_identity(self, runner):
        """path --json MUST report no descriptor for an unwrapped path."""
        result = runner.invoke(cli, ["path", "/ssh:root@localhost:/x", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == {"path": "/x", "descriptor": None}

    def test_missing_file(self, runner):
        """path MUST fail without a file name."""
        result = runner.invoke(cli, ["path"])

        assert result.exit_code == 1
        assert "No file name" in result.output

    def test_blank_user(self, runner):
        """path MUST fail for a blank user."""
        result = runner.invoke(cli, ["path", "/etc/hosts", "-u", "  "])

        assert result.exit_code == 1
        assert "Invalid target user" in result.output

    def test_separate_syntax(self, runner):
        """--syntax MUST switch the address syntax."""
        result = runner.invoke(cli, ["--syntax", "separate", "path", "/[ssh/bob@web]/x"])

        assert result.exit_code == 0
        assert result.output == "/[ssh/bob@web|sudo/root@web]/x\n"

    def test_verbose(self, runner):
        """-v MUST still print the path."""
        result = runner.invoke(cli, ["-v", "path", "/ssh:bob@web:/x"])

        assert result.exit_code == 0
        assert "/ssh:bob@web|sudo:root@web:/x" in result.output


# =============================================================================
# hop command
# =============================================================================


class TestHopCommand:
    """Tests for the hop command."""

    def test_hop(self, runner):
        """hop MUST print the hop fragment."""
        result = runner.invoke(cli, ["hop", "/ssh:alice@gw|scp:bob@web:/x"])

        assert result.exit_code == 0
        assert result.output.strip() == "ssh:alice@gw|ssh:bob@web|"

    def test_hop_local_file(self, runner):
        """hop MUST fail for local files."""
        result = runner.invoke(cli, ["hop", "/etc/hosts"])

        assert result.exit_code == 1
        assert "Not a remote file name" in result.output


# =============================================================================
# methods command and global options
# =============================================================================


class TestMethodsCommand:
    """Tests for the methods command."""

    def test_lists_methods(self, runner):
        """methods MUST list methods with their hop method."""
        result = runner.invoke(cli, ["methods"])

        assert result.exit_code == 0
        lines = {line.split()[0]: line.split() for line in result.output.splitlines()[2:]}
        assert lines["scp"][-1] == "ssh"
        assert lines["sshx"][-1] == "sshx"
        assert lines["sftp"][3] == "yes"


class TestGlobalOptions:
    """Tests for group options."""

    def test_version(self, runner):
        """--version MUST print the version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_config(self, runner, mock_load_config):
        """Invalid configuration MUST be reported as an error."""
        mock_load_config.side_effect = ValueError("syntax.name")
        result = runner.invoke(cli, ["path", "/etc/hosts"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestConfigErrors:
    """Tests for configuration errors surfaced by the CLI."""

    def test_invalid_local_host_pattern(self, runner, mock_load_config, tmp_path):
        """A bad local host pattern MUST be reported, not raised."""
        from sudohop.config import load_config

        cfg = tmp_path / "sudohop.toml"
        cfg.write_text('[transport]\nlocal_host_pattern = "(unclosed"\n')
        mock_load_config.side_effect = load_config

        result = runner.invoke(cli, ["-c", str(cfg), "path", "/etc/hosts"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "local_host_pattern" in result.output
        assert isinstance(result.exception, SystemExit)
