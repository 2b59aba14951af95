"""Error reporting — logs every failure, notifies the user once per message."""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

from rich.console import Console

from svnbridge.logging_config import get_logger
from svnbridge.svn.adapter import CommandRunner, ShellResult

logger = get_logger(__name__)

Notifier = Callable[[str], None]

GENERIC_ERROR_MESSAGE = "SVN error happened while processing the assets. Check the logs."


def console_notifier(message: str) -> None:
    Console(stderr=True).print(f"[bold red]SVN Error:[/bold red] {message}")


class ErrorReporter:
    """Sends user-facing error notifications without repeating the last one.

    Bulk operations tend to fail the same way for every path; the message is
    logged each time but the notifier only sees it when it changes.
    """

    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self._notifier = notifier or console_notifier
        self._lock = threading.Lock()
        self._last_displayed = ""

    @property
    def last_displayed(self) -> str:
        return self._last_displayed

    def report(self, message: str, details: str = "", *, silent: bool = False) -> bool:
        """Log *message* and notify unless silent or a repeat. Returns True if notified."""
        if details:
            logger.error("%s\n\n%s", message, details)
        else:
            logger.error("%s", message)

        if silent:
            return False
        with self._lock:
            if message == self._last_displayed:
                return False
            self._last_displayed = message
        self._notifier(message)
        return True

    def reset(self) -> None:
        with self._lock:
            self._last_displayed = ""


class OperationReport:
    """Transcript of a multi-command operation.

    Commands run through it stream their output into the transcript; on exit
    the transcript is logged as an error if the last result failed, or at
    INFO level when tracing is on::

        with OperationReport(reporter, trace=True) as report:
            report.run(runner, ["delete", "--force", "Foo@"], COMMAND_TIMEOUT_MS)
    """

    def __init__(self, reporter: ErrorReporter, *, trace: bool = False, silent: bool = False) -> None:
        self._reporter = reporter
        self._trace = trace
        self._silent = silent
        self.lines: List[str] = ["SVN Operations:"]
        self.result: ShellResult = ShellResult()

    def append(self, line: str) -> None:
        self.lines.append(line)

    def run(self, runner: CommandRunner, args: List[str], timeout_ms: int) -> ShellResult:
        """Run one command with its output streamed into the transcript as it arrives."""
        self.append(" ".join(args))
        result = runner.run(args, timeout_ms, sink=self.append)
        if result.error:
            self.append(result.error)
        self.result = result
        return result

    def __enter__(self) -> "OperationReport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if len(self.lines) <= 1:
            return
        text = "\n".join(self.lines)
        if self.result.has_errors:
            self._reporter.report(GENERIC_ERROR_MESSAGE, text, silent=self._silent)
        elif self._trace:
            logger.info("%s", text)
