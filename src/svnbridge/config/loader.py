"""Load and merge configuration from .svnbridge.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from svnbridge.config.schema import (
    IntegrationConfig,
    MetaConfig,
    OutputConfig,
    RulesConfig,
    SvnBridgeConfig,
    SvnConfig,
)

CONFIG_FILENAME = ".svnbridge.toml"

_TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(project_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = project_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: SvnBridgeConfig) -> None:
    """Apply SVNBRIDGE_* environment variable overrides."""
    if (val := os.environ.get("SVNBRIDGE_CLI_PATH")) is not None:
        cfg.svn.cli_path = val
    if val := os.environ.get("SVNBRIDGE_TIMEOUT_MS"):
        try:
            cfg.svn.timeout_ms = int(val)
        except ValueError:
            raise ConfigError(f"SVNBRIDGE_TIMEOUT_MS must be an integer, got {val!r}") from None
    if val := os.environ.get("SVNBRIDGE_FORMAT"):
        if val in ("terminal", "json"):
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("SVNBRIDGE_DISABLE_RULES"):
        cfg.rules.disable.extend(r.strip() for r in val.split(",") if r.strip())
    if val := os.environ.get("SVNBRIDGE_TRACE"):
        cfg.svn.trace_operations = val.lower() in _TRUE_VALUES


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.get(section, {}).items() if k in valid_fields}
    return cls(**filtered)


def _validate(cfg: SvnBridgeConfig) -> None:
    if cfg.svn.timeout_ms <= 0:
        raise ConfigError(f"[svn] timeout_ms must be positive, got {cfg.svn.timeout_ms}")
    if cfg.output.format not in ("terminal", "json"):
        raise ConfigError(f"[output] format must be 'terminal' or 'json', got {cfg.output.format!r}")


def load_config(
    project_root: Path,
    config_override: Optional[str] = None,
) -> SvnBridgeConfig:
    """Load, validate, and return an SvnBridgeConfig."""
    config_path = find_config_file(project_root, config_override)

    if config_path is None:
        cfg = SvnBridgeConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = SvnBridgeConfig(
            version=raw.get("version", "1.0"),
            svn=_build_section(raw, SvnConfig, "svn"),
            integration=_build_section(raw, IntegrationConfig, "integration"),
            meta=_build_section(raw, MetaConfig, "meta"),
            rules=_build_section(raw, RulesConfig, "rules"),
            output=_build_section(raw, OutputConfig, "output"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
