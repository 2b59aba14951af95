"""Data models for svn status, locks and operation outcomes.

The column enums carry the status-report character as their value, so
``FileStatus("M")`` maps a code to its enum and ``.value`` maps it back.
An unknown character raises ``ValueError``; there is no default member.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from svnbridge.svn.adapter import COMMAND_TIMEOUT_MS


class FileStatus(str, Enum):
    NORMAL = " "
    ADDED = "A"
    CONFLICTED = "C"
    DELETED = "D"
    IGNORED = "I"
    MODIFIED = "M"
    REPLACED = "R"
    UNVERSIONED = "?"
    MISSING = "!"
    EXTERNAL = "X"
    OBSTRUCTED = "~"


class PropertyStatus(str, Enum):
    NORMAL = " "
    CONFLICTED = "C"
    MODIFIED = "M"


class LockStatus(str, Enum):
    NO_LOCK = " "
    LOCKED_HERE = "K"
    LOCKED_BY_OTHER = "O"
    LOCKED_BUT_STOLEN = "T"
    BROKEN_LOCK = "B"


class TreeConflictStatus(str, Enum):
    NORMAL = " "
    TREE_CONFLICT = "C"


class RemoteStatus(str, Enum):
    """Only meaningful for status queries made with ``-u``."""

    NONE = " "
    MODIFIED = "*"


class SearchDepth(str, Enum):
    EMPTY = "empty"
    INFINITY = "infinity"


class UpdateOutcome(str, Enum):
    SUCCESS = "success"
    SUCCESS_WITH_CONFLICTS = "success_with_conflicts"
    UNABLE_TO_CONNECT = "unable_to_connect"
    UNKNOWN_ERROR = "unknown_error"


class CommitOutcome(str, Enum):
    SUCCESS = "success"
    OUT_OF_DATE = "out_of_date"
    HAS_CONFLICTS = "has_conflicts"
    CONTAINS_UNVERSIONED = "contains_unversioned"
    PRECOMMIT_HOOK_REJECTED = "precommit_hook_rejected"
    UNABLE_TO_CONNECT = "unable_to_connect"
    UNKNOWN_ERROR = "unknown_error"


class LockOutcome(str, Enum):
    SUCCESS = "success"
    LOCKED_BY_OTHER = "locked_by_other"
    FAILED = "failed"


class StatusErrorOutcome(str, Enum):
    NOT_VERSIONED = "not_versioned"
    MISSING_EXECUTABLE = "missing_executable"
    CRITICAL = "critical"


@dataclass(frozen=True)
class LockDetails:
    """Lock metadata for one path.

    ``LockDetails.EMPTY`` means "not locked or not fetched". A record with
    ``path`` set and no ``owner`` was fetched and is confirmed unlocked.
    """

    path: str = ""
    owner: str = ""
    date: str = ""  # as printed by svn, not parsed
    message: str = ""

    EMPTY: ClassVar["LockDetails"]

    @property
    def is_empty(self) -> bool:
        return not self.path

    @property
    def is_locked(self) -> bool:
        return bool(self.owner)


LockDetails.EMPTY = LockDetails()


@dataclass(frozen=True)
class StatusRecord:
    """Version-control state of a single path."""

    status: FileStatus = FileStatus.NORMAL
    property_status: PropertyStatus = PropertyStatus.NORMAL
    lock_status: LockStatus = LockStatus.NO_LOCK
    tree_conflict_status: TreeConflictStatus = TreeConflictStatus.NORMAL
    remote_status: RemoteStatus = RemoteStatus.NONE
    path: str = ""
    lock_details: LockDetails = LockDetails.EMPTY

    @property
    def is_valid(self) -> bool:
        """False for default-constructed records (e.g. after an error)."""
        return bool(self.path)

    @property
    def is_conflicted(self) -> bool:
        return (
            self.status == FileStatus.CONFLICTED
            or self.property_status == PropertyStatus.CONFLICTED
            or self.tree_conflict_status == TreeConflictStatus.TREE_CONFLICT
        )


@dataclass
class StatusOptions:
    depth: SearchDepth = SearchDepth.INFINITY
    offline: bool = True
    fetch_lock_owner: bool = False  # ignored when offline
    raise_error: bool = True
    timeout_ms: int = COMMAND_TIMEOUT_MS
