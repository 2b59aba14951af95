"""``svn info`` scraping and the two-step lock-owner lookup."""

from __future__ import annotations

from typing import Optional

from svnbridge.reporting import ErrorReporter
from svnbridge.state import IntegrationState
from svnbridge.svn.adapter import COMMAND_TIMEOUT_MS, CommandRunner, format_path
from svnbridge.svn.models import LockDetails

URL_LABEL = "URL:"
LOCK_OWNER_LABEL = "Lock Owner:"
LOCK_CREATED_LABEL = "Lock Created:"
LOCK_COMMENT_LABEL = "Lock Comment"


def extract_line_value(label: str, text: str) -> str:
    """Return the value after ``label`` on its line, or ``""`` if absent.

    The label is matched case-insensitively; the value starts after the
    label and one separating space and ends at the line break.
    """
    index = text.lower().find(label.lower())
    if index == -1:
        return ""

    value_start = index + len(label) + 1
    line_end = text.find("\n", value_start)
    if line_end == -1:
        line_end = len(text)
    return text[value_start:line_end].rstrip("\r")


def extract_lock_comment(text: str) -> str:
    """Return every line after the ``Lock Comment (N lines):`` header.

    svn omits the section entirely when the lock has no comment.
    """
    index = text.lower().find(LOCK_COMMENT_LABEL.lower())
    if index == -1:
        return ""
    header_end = text.find("\n", index)
    if header_end == -1:
        return ""
    return text[header_end + 1:].replace("\r", "")


class LockDetailsFetcher:
    """Asks the repository who holds the lock on a path.

    The working-copy URL is resolved for every path: externals can live
    under a different repository root than the working copy.
    """

    def __init__(
        self,
        runner: CommandRunner,
        reporter: ErrorReporter,
        state: Optional[IntegrationState] = None,
    ) -> None:
        self._runner = runner
        self._reporter = reporter
        self._state = state or IntegrationState()

    def __call__(self, path: str, timeout_ms: int = COMMAND_TIMEOUT_MS, raise_error: bool = False) -> LockDetails:
        return self.fetch(path, timeout_ms, raise_error)

    def fetch(self, path: str, timeout_ms: int = COMMAND_TIMEOUT_MS, raise_error: bool = False) -> LockDetails:
        # Step 1: repository URL of the working-copy path.
        result = self._runner.run(["info", format_path(path)], timeout_ms)
        url = extract_line_value(URL_LABEL, result.output)

        if result.has_errors or not url:
            self._fail(f'Failed to get info for "{path}".', result.output, result.error, raise_error)
            return LockDetails.EMPTY

        # Step 2: ask the server directly, the working copy may be stale.
        result = self._runner.run(["info", format_path(url)], timeout_ms)
        owner = extract_line_value(LOCK_OWNER_LABEL, result.output)

        if result.has_errors or not owner:
            # No owner simply means no lock, as long as the answer looks like info output.
            if URL_LABEL.lower() in result.output.lower():
                return LockDetails(path=path)

            self._fail(f'Failed to get lock details for "{path}".', result.output, result.error, raise_error)
            return LockDetails.EMPTY

        return LockDetails(
            path=path,
            owner=owner,
            date=extract_line_value(LOCK_CREATED_LABEL, result.output),
            message=extract_lock_comment(result.output),
        )

    def _fail(self, headline: str, output: str, error: str, raise_error: bool) -> None:
        if not raise_error or self._state.silent:
            return
        message = f"{headline}\n{output}\n{error}"
        self._reporter.report(message, error)
