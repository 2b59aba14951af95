"""Tests for config loading, validation, and env var overrides."""

from pathlib import Path

import pytest

from svnbridge.config.defaults import DEFAULT_TOML
from svnbridge.config.loader import ConfigError, load_config
from svnbridge.svn.adapter import COMMAND_TIMEOUT_MS


class TestConfigLoading:
    def test_default_config(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg.svn.cli_path == ""
        assert cfg.svn.timeout_ms == COMMAND_TIMEOUT_MS
        assert cfg.integration.enabled is True
        assert cfg.meta.suffix == ".meta"
        assert cfg.meta.roots == ["Assets"]
        assert cfg.output.format == "terminal"

    def test_starter_file_loads(self, tmp_path: Path):
        (tmp_path / ".svnbridge.toml").write_text(DEFAULT_TOML)
        cfg = load_config(tmp_path)
        assert cfg.svn.timeout_ms == 35000
        assert cfg.rules.custom_dir == ".svnbridge-rules"

    def test_custom_toml(self, tmp_path: Path):
        (tmp_path / ".svnbridge.toml").write_text(
            'version = "1.0"\n'
            '[svn]\n'
            'cli_path = "Tools/svn/bin/svn"\n'
            'timeout_ms = 60000\n'
            'trace_operations = true\n'
            '[meta]\n'
            'roots = ["Assets", "Packages"]\n'
            '[integration]\n'
            'enabled = false\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.svn.cli_path == "Tools/svn/bin/svn"
        assert cfg.svn.timeout_ms == 60000
        assert cfg.svn.trace_operations is True
        assert cfg.meta.roots == ["Assets", "Packages"]
        assert cfg.integration.enabled is False

    def test_unknown_keys_ignored(self, tmp_path: Path):
        (tmp_path / ".svnbridge.toml").write_text('[svn]\ncolour = "blue"\ntimeout_ms = 1000\n')
        assert load_config(tmp_path).svn.timeout_ms == 1000

    def test_config_override_path(self, tmp_path: Path):
        custom = tmp_path / "custom.toml"
        custom.write_text('[output]\nformat = "json"\n')
        cfg = load_config(tmp_path, config_override=str(custom))
        assert cfg.output.format == "json"

    def test_missing_override_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, config_override="/nonexistent/config.toml")

    def test_invalid_toml_raises(self, tmp_path: Path):
        (tmp_path / ".svnbridge.toml").write_text("this is not valid [toml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_non_positive_timeout_raises(self, tmp_path: Path):
        (tmp_path / ".svnbridge.toml").write_text("[svn]\ntimeout_ms = 0\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_invalid_format_raises(self, tmp_path: Path):
        (tmp_path / ".svnbridge.toml").write_text('[output]\nformat = "xml"\n')
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestEnvVarOverrides:
    def test_cli_path_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SVNBRIDGE_CLI_PATH", "/opt/svn/bin/svn")
        assert load_config(tmp_path).svn.cli_path == "/opt/svn/bin/svn"

    def test_timeout_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SVNBRIDGE_TIMEOUT_MS", "5000")
        assert load_config(tmp_path).svn.timeout_ms == 5000

    def test_bad_timeout_raises(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SVNBRIDGE_TIMEOUT_MS", "soon")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_format_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SVNBRIDGE_FORMAT", "json")
        assert load_config(tmp_path).output.format == "json"

    def test_invalid_format_env_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SVNBRIDGE_FORMAT", "xml")
        assert load_config(tmp_path).output.format == "terminal"

    def test_disable_rules_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SVNBRIDGE_DISABLE_RULES", "COMMIT_OUT_OF_DATE, UPDATE_UNABLE_TO_CONNECT")
        cfg = load_config(tmp_path)
        assert cfg.rules.disable == ["COMMIT_OUT_OF_DATE", "UPDATE_UNABLE_TO_CONNECT"]

    def test_trace_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SVNBRIDGE_TRACE", "yes")
        assert load_config(tmp_path).svn.trace_operations is True
