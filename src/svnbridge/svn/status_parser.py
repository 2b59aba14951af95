"""Fixed-column ``svn status`` parser.

Yields StatusRecord objects lazily. Column layout is described in
``svn help status``: seven one-character status columns, a space, then the
path. With ``-u`` a remote-status column and a revision field are inserted
before the path.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Generator, List, Optional

from svnbridge.svn.adapter import SvnError
from svnbridge.svn.models import (
    FileStatus,
    LockDetails,
    LockStatus,
    PropertyStatus,
    RemoteStatus,
    StatusOptions,
    StatusRecord,
    TreeConflictStatus,
)

# --- Column layout ---

FILE_COLUMN = 0
PROPERTY_COLUMN = 1
LOCK_COLUMN = 5
TREE_CONFLICT_COLUMN = 6
REMOTE_COLUMN = 8

OFFLINE_PATH_START = 7 + 1  # status columns + separator
ONLINE_PATH_START = OFFLINE_PATH_START + 13  # + remote status + revision

# --- Trailer / section markers ---

_CONFLICT_SUMMARY = "Summary"
_REVISION_TRAILER = "Status"
_CHANGELIST_SEPARATOR = "---"
_EXTERNAL_HEADER = "Performing status"

LockFetcher = Callable[[str, int, bool], LockDetails]


class StatusParseError(SvnError):
    """Raised when a status line carries a code outside the documented set."""

    def __init__(self, line: str, column: int) -> None:
        self.line = line
        self.column = column
        super().__init__(f"Unknown svn status code in column {column}: {line!r}")


def is_hidden_path(path: str) -> bool:
    """True if any path component starts with ``.`` (``/.`` or ``\\.``)."""
    for i in range(len(path) - 1):
        if path[i + 1] == "." and path[i] in ("/", "\\"):
            return True
    return False


def _column(line: str, index: int) -> str:
    # Trailing spaces are trimmed by some tools; a missing column is a blank one.
    return line[index] if index < len(line) else " "


class StatusParser:
    """Parse ``svn status`` output into StatusRecord objects.

    Usage::

        parser = StatusParser(output, StatusOptions(offline=True))
        for record in parser.parse():
            ...

    ``lock_fetcher`` is called as ``fetch(path, timeout_ms, raise_error)``
    for locked paths when the options ask for the lock owner of an online
    query.
    """

    def __init__(
        self,
        text: str,
        options: StatusOptions,
        lock_fetcher: Optional[LockFetcher] = None,
    ) -> None:
        self._lines: List[str] = text.splitlines()
        self._options = options
        self._lock_fetcher = lock_fetcher

    def parse(self) -> Generator[StatusRecord, None, None]:
        """Yield one StatusRecord per status line, in output order."""
        options = self._options
        fetch_locks = (
            not options.offline
            and options.fetch_lock_owner
            and self._lock_fetcher is not None
        )

        for line in self._lines:
            line = line.rstrip("\r")

            # "moved from / to" annotation for the previous entry
            if len(line) > REMOTE_COLUMN and line[REMOTE_COLUMN] == ">":
                continue
            # tree conflict description for the previous entry
            if len(line) > TREE_CONFLICT_COLUMN and line[TREE_CONFLICT_COLUMN] == ">":
                continue

            # "Summary of conflicts:" block
            if line.startswith(_CONFLICT_SUMMARY):
                break
            # "Status against revision:     14" (only with -u)
            if line.startswith(_REVISION_TRAILER):
                break
            # "Performing status on external item at '...':"
            if line.startswith(_EXTERNAL_HEADER):
                continue
            if not line.strip():
                continue
            # "--- Changelist 'ignore-on-commit':"
            if line.startswith(_CHANGELIST_SEPARATOR):
                break

            record = self._parse_line(line)
            if is_hidden_path(record.path):
                continue

            if fetch_locks and record.lock_status not in (
                LockStatus.NO_LOCK,
                LockStatus.BROKEN_LOCK,
            ):
                assert self._lock_fetcher is not None
                details = self._lock_fetcher(
                    record.path, options.timeout_ms, options.raise_error
                )
                record = replace(record, lock_details=details)

            yield record

    def _parse_line(self, line: str) -> StatusRecord:
        status = _decode(FileStatus, line, FILE_COLUMN)
        property_status = _decode(PropertyStatus, line, PROPERTY_COLUMN)
        lock_status = _decode(LockStatus, line, LOCK_COLUMN)
        tree_conflict = _decode(TreeConflictStatus, line, TREE_CONFLICT_COLUMN)

        if self._options.offline:
            remote_status = RemoteStatus.NONE
            path_start = OFFLINE_PATH_START
        else:
            remote_status = _decode(RemoteStatus, line, REMOTE_COLUMN)
            path_start = ONLINE_PATH_START

        return StatusRecord(
            status=status,
            property_status=property_status,
            lock_status=lock_status,
            tree_conflict_status=tree_conflict,
            remote_status=remote_status,
            path=line[path_start:],
        )


def _decode(enum_cls, line: str, column: int):
    try:
        return enum_cls(_column(line, column))
    except ValueError:
        raise StatusParseError(line, column) from None
