"""Shared test fixtures — sample status output, a fake svn runner, clients."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest

from svnbridge.client import SvnClient
from svnbridge.config.schema import SvnBridgeConfig
from svnbridge.reporting import ErrorReporter
from svnbridge.rules.registry import build_classifiers
from svnbridge.state import IntegrationState
from svnbridge.svn.adapter import COMMAND_TIMEOUT_MS, ShellResult


def status_line(
    path: str,
    file: str = " ",
    prop: str = " ",
    lock: str = " ",
    tree: str = " ",
    remote: Optional[str] = None,
    revision: str = "",
) -> str:
    """Build one ``svn status`` line with the real column layout.

    Without *remote* the offline layout is produced (seven status columns,
    a space, the path); with it the ``-u`` layout (remote flag at column 8,
    a right-aligned revision, the path at column 21).
    """
    columns = f"{file}{prop}   {lock}{tree}"
    if remote is None:
        return f"{columns} {path}"
    return f"{columns} {remote}   {revision:>6}   {path}"


class FakeRunner:
    """Stands in for CommandRunner: records argument lists, replays results."""

    def __init__(self, *results: ShellResult) -> None:
        self.results: List[ShellResult] = list(results)
        self.calls: List[Tuple[List[str], int]] = []
        self.targets: List[str] = []

    def queue(self, *results: ShellResult) -> "FakeRunner":
        self.results.extend(results)
        return self

    def run(self, args: Sequence[str], timeout_ms: int = COMMAND_TIMEOUT_MS, sink=None) -> ShellResult:
        args = list(args)
        self.calls.append((args, timeout_ms))
        if "--targets" in args:
            # the targets file only exists while the command runs
            targets_file = Path(args[args.index("--targets") + 1])
            self.targets = targets_file.read_text(encoding="utf-8").splitlines()
        result = self.results.pop(0) if self.results else ShellResult()
        if sink is not None:
            for line in result.output.splitlines():
                sink(line)
        return result

    @property
    def args(self) -> List[List[str]]:
        return [call[0] for call in self.calls]


@pytest.fixture
def sample_status_offline() -> str:
    """Recursive offline status with a conflict summary trailer."""
    return "\n".join([
        status_line("Assets/Foo.cs", file="M"),
        status_line("Assets/New.png", file="A"),
        status_line("Assets/Gone.mat", file="!"),
        status_line("Assets/Scene.unity", file="C", tree="C"),
        "      >   local file edit, incoming file delete or move upon update",
        status_line("Assets/.hidden/cache.bin", file="?"),
        status_line("Assets/Locked.psd", lock="K"),
        "Summary of conflicts:",
        "  Text conflicts: 1",
        "  Tree conflicts: 1",
        "",
    ])


@pytest.fixture
def sample_status_online() -> str:
    """``svn status -u`` output with a remote change and a lock held elsewhere."""
    return "\n".join([
        status_line("Assets/Bar.png", file="?", remote=" "),
        status_line("Assets/Foo.cs", file="M", remote="*", revision="14"),
        status_line("Assets/Hero.psd", lock="O", remote=" ", revision="12"),
        "Status against revision:     14",
        "",
    ])


@pytest.fixture
def sample_info_locked() -> str:
    return textwrap.dedent("""\
        Path: Hero.psd
        Name: Hero.psd
        URL: https://svn.example.com/repo/trunk/Assets/Hero.psd
        Repository Root: https://svn.example.com/repo
        Revision: 14
        Node Kind: file
        Lock Token: opaquelocktoken:7d3a6b0e-0c1f-4a4b-a6c1-5f5e2a1d9c11
        Lock Owner: alice
        Lock Created: 2024-03-02 10:15:00 +0100 (Sat, 02 Mar 2024)
        Lock Comment (1 line):
        Repainting the hero
    """)


@pytest.fixture
def sample_info_unlocked() -> str:
    return textwrap.dedent("""\
        Path: Hero.psd
        Name: Hero.psd
        URL: https://svn.example.com/repo/trunk/Assets/Hero.psd
        Repository Root: https://svn.example.com/repo
        Revision: 14
        Node Kind: file
    """)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def notifications() -> List[str]:
    """Messages the error reporter showed to the user."""
    return []


@pytest.fixture
def client(tmp_path: Path, fake_runner: FakeRunner, notifications: List[str]) -> SvnClient:
    config = SvnBridgeConfig()
    return SvnClient(
        config,
        tmp_path,
        runner=fake_runner,
        state=IntegrationState(),
        reporter=ErrorReporter(notifier=notifications.append),
        classifiers=build_classifiers(config),
    )
