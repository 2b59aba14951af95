"""svn subprocess wrapper — executable resolution, timeouts, live output."""

from __future__ import annotations

import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from svnbridge.logging_config import get_logger

logger = get_logger(__name__)

COMMAND_TIMEOUT_MS = 35000

# Prefix of the error text produced when the executable cannot be started.
# The status rule table keys on it.
EXECUTABLE_NOT_FOUND = "svnbridge: executable not found"

OutputSink = Callable[[str], None]


class SvnError(Exception):
    """Base class for svnbridge errors."""


class SvnCommandError(SvnError):
    """Raised when svn reports a critical error no rule could classify."""

    def __init__(self, operation: str, path: str, error: str) -> None:
        self.operation = operation
        self.path = path
        self.error = error
        super().__init__(f"svn {operation} failed for '{path}':\n{error}")


@dataclass(frozen=True)
class ShellResult:
    """Captured output of one svn invocation."""

    output: str = ""
    error: str = ""
    timed_out: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.error)


def format_path(path: str) -> str:
    """Append ``@`` so svn never reads a trailing ``@rev`` in a file name as a peg revision."""
    return f"{path}@"


def resolve_executable(cli_path: str = "", project_root: Optional[Path] = None) -> str:
    """Return the configured svn executable, or ``svn`` to be found on PATH."""
    if not cli_path:
        return "svn"
    p = Path(cli_path)
    if not p.is_absolute() and project_root is not None:
        p = project_root / p
    return str(p)


class CommandRunner:
    """Runs one executable with argument lists and collects its output.

    Failures to start the process and timeouts are reported as error text on
    the returned ``ShellResult``; nothing here raises for a failed command.
    """

    def __init__(self, executable: str = "svn", cwd: Optional[Path] = None) -> None:
        self.executable = executable
        self.cwd = cwd

    def run(
        self,
        args: Sequence[str],
        timeout_ms: int = COMMAND_TIMEOUT_MS,
        sink: Optional[OutputSink] = None,
    ) -> ShellResult:
        cmd = [self.executable, *args]
        logger.debug("run: %s (timeout %dms)", " ".join(cmd), timeout_ms)
        try:
            if sink is None:
                return self._run_captured(cmd, timeout_ms)
            return self._run_streamed(cmd, timeout_ms, sink)
        except FileNotFoundError as exc:
            return ShellResult(error=f"{EXECUTABLE_NOT_FOUND}: {self.executable} ({exc})")
        except PermissionError as exc:
            return ShellResult(error=f"{EXECUTABLE_NOT_FOUND}: {self.executable} ({exc})")

    def _run_captured(self, cmd: List[str], timeout_ms: int) -> ShellResult:
        try:
            result = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=timeout_ms / 1000,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.TimeoutExpired:
            return _timeout_result(cmd, timeout_ms)
        return ShellResult(output=result.stdout, error=result.stderr.strip())

    def _run_streamed(self, cmd: List[str], timeout_ms: int, sink: OutputSink) -> ShellResult:
        proc = subprocess.Popen(
            cmd,
            cwd=self.cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        killed = threading.Event()

        def _kill() -> None:
            killed.set()
            proc.kill()

        # stderr is drained on its own thread so a chatty child never blocks on a full pipe
        errors: List[str] = []
        reader = threading.Thread(target=_drain, args=(proc.stderr, errors), daemon=True)
        reader.start()
        timer = threading.Timer(timeout_ms / 1000, _kill)
        timer.start()
        lines: List[str] = []
        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                lines.append(line)
                sink(line.rstrip("\n"))
            proc.wait()
        except BaseException:
            proc.kill()
            proc.wait()
            raise
        finally:
            timer.cancel()
            reader.join()
            proc.stdout.close()

        if killed.is_set():
            return _timeout_result(cmd, timeout_ms)
        return ShellResult(output="".join(lines), error="".join(errors).strip())


def _drain(stream, chunks: List[str]) -> None:
    try:
        for chunk in iter(lambda: stream.read(4096), ""):
            chunks.append(chunk)
    finally:
        stream.close()


def _timeout_result(cmd: List[str], timeout_ms: int) -> ShellResult:
    logger.warning("svn command timed out after %dms: %s", timeout_ms, " ".join(cmd))
    return ShellResult(
        error=f"svnbridge: command timed out after {timeout_ms}ms: {' '.join(cmd)}",
        timed_out=True,
    )
