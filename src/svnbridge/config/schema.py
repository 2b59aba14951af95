"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

from svnbridge.svn.adapter import COMMAND_TIMEOUT_MS

OutputFormat = Literal["terminal", "json"]


@dataclass
class SvnConfig:
    cli_path: str = ""  # empty = "svn" from PATH; relative paths resolve against the project root
    timeout_ms: int = COMMAND_TIMEOUT_MS
    trace_operations: bool = False  # log every operation transcript at INFO


@dataclass
class IntegrationConfig:
    enabled: bool = True


@dataclass
class MetaConfig:
    suffix: str = ".meta"
    roots: List[str] = field(default_factory=lambda: ["Assets"])  # folders whose directories carry metas


@dataclass
class RulesConfig:
    disable: List[str] = field(default_factory=list)
    custom_dir: str = ".svnbridge-rules"


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"


@dataclass
class SvnBridgeConfig:
    version: str = "1.0"
    svn: SvnConfig = field(default_factory=SvnConfig)
    integration: IntegrationConfig = field(default_factory=IntegrationConfig)
    meta: MetaConfig = field(default_factory=MetaConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
