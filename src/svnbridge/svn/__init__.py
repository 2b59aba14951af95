"""svn interface layer — subprocess adapter, status parsing, models."""

from svnbridge.svn.adapter import (
    COMMAND_TIMEOUT_MS,
    CommandRunner,
    ShellResult,
    SvnCommandError,
    SvnError,
    format_path,
    resolve_executable,
)
from svnbridge.svn.models import (
    CommitOutcome,
    FileStatus,
    LockDetails,
    LockOutcome,
    LockStatus,
    PropertyStatus,
    RemoteStatus,
    SearchDepth,
    StatusErrorOutcome,
    StatusOptions,
    StatusRecord,
    TreeConflictStatus,
    UpdateOutcome,
)
from svnbridge.svn.status_parser import StatusParseError, StatusParser, is_hidden_path

__all__ = [
    "COMMAND_TIMEOUT_MS",
    "CommandRunner",
    "CommitOutcome",
    "FileStatus",
    "LockDetails",
    "LockOutcome",
    "LockStatus",
    "PropertyStatus",
    "RemoteStatus",
    "SearchDepth",
    "ShellResult",
    "StatusErrorOutcome",
    "StatusOptions",
    "StatusParseError",
    "StatusParser",
    "StatusRecord",
    "SvnCommandError",
    "SvnError",
    "TreeConflictStatus",
    "UpdateOutcome",
    "format_path",
    "is_hidden_path",
    "resolve_executable",
]
