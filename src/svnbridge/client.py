"""svn operations — argument building, outcome classification, caller policies.

Every public operation has a blocking form and, where it talks to the
server, an ``*_async`` form returning an AsyncOperation. The blocking forms
may take seconds; keep them off UI threads.
"""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from svnbridge.asyncop import AsyncOperation, OperationScheduler, get_default_scheduler
from svnbridge.config.schema import SvnBridgeConfig
from svnbridge.logging_config import get_logger
from svnbridge.reporting import GENERIC_ERROR_MESSAGE, ErrorReporter, OperationReport
from svnbridge.rules.models import OperationFamily
from svnbridge.rules.registry import ErrorClassifier, build_classifiers
from svnbridge.state import IntegrationState
from svnbridge.svn.adapter import (
    CommandRunner,
    ShellResult,
    SvnCommandError,
    format_path,
    resolve_executable,
)
from svnbridge.svn.info import LockDetailsFetcher
from svnbridge.svn.models import (
    CommitOutcome,
    FileStatus,
    LockDetails,
    LockOutcome,
    SearchDepth,
    StatusErrorOutcome,
    StatusOptions,
    StatusRecord,
    UpdateOutcome,
)
from svnbridge.svn.status_parser import StatusParser

logger = get_logger(__name__)

# Update and commit move whole trees over the network.
LONG_OPERATION_FACTOR = 10
CONFLICT_SCAN_FACTOR = 4

_CONFLICT_SUMMARY = "Summary of conflicts:"
_CONFLICT_COUNT_RE = re.compile(r"^\s*(?:Text|Property|Tree) conflicts:\s+(\d+)", re.MULTILINE)


class Prompter:
    """Boundary to interactive confirmation dialogs.

    The default confirms everything, which is what a non-interactive host
    wants. UI hosts subclass it.
    """

    def confirm(self, title: str, message: str, ok: str = "OK", cancel: str = "Cancel") -> bool:
        logger.debug("confirm %r: %s -> %s", title, message.replace("\n", " "), ok)
        return True


class SvnClient:
    """Typed front-end to the svn command-line client for one working copy."""

    def __init__(
        self,
        config: Optional[SvnBridgeConfig] = None,
        project_root: Optional[Path] = None,
        *,
        runner: Optional[CommandRunner] = None,
        state: Optional[IntegrationState] = None,
        reporter: Optional[ErrorReporter] = None,
        classifiers: Optional[Dict[OperationFamily, ErrorClassifier]] = None,
        prompter: Optional[Prompter] = None,
        scheduler: Optional[OperationScheduler] = None,
        on_show_changes: Optional[Callable[[], None]] = None,
    ) -> None:
        self.config = config or SvnBridgeConfig()
        self.project_root = project_root or Path.cwd()
        self.runner = runner or CommandRunner(
            resolve_executable(self.config.svn.cli_path, self.project_root),
            cwd=self.project_root,
        )
        self.state = state or IntegrationState(enabled=self.config.integration.enabled)
        self.reporter = reporter or ErrorReporter()
        self.classifiers = classifiers or build_classifiers(self.config, self.project_root)
        self.prompter = prompter or Prompter()
        self.scheduler = scheduler
        self.on_show_changes = on_show_changes
        self.lock_fetcher = LockDetailsFetcher(self.runner, self.reporter, self.state)

    @property
    def active(self) -> bool:
        """False when the integration is switched off in config or temporarily disabled."""
        return self.state.active

    @property
    def timeout_ms(self) -> int:
        return self.config.svn.timeout_ms

    # ---- status ----

    def get_statuses(self, path: str, options: StatusOptions) -> Iterator[StatusRecord]:
        """Return status records for *path*.

        Only paths with something to show (changes, locks, remote changes)
        are reported. With depth ``empty`` a path without changes still gets
        one NORMAL record.
        """
        args = ["status", f"--depth={options.depth.value}"]
        if not options.offline:
            args.append("-u")
        args.append(format_path(path))

        result = self.runner.run(args, options.timeout_ms)

        if result.has_errors:
            if options.raise_error:
                self._handle_status_error(path, result.error)
            else:
                logger.debug("status of %s failed: %s", path, result.error)
            return iter(())

        if options.depth == SearchDepth.EMPTY:
            if options.offline and not result.output.strip():
                return iter([_normal_record(path)])
            # with -u an unchanged path only prints "Status against revision: N"
            if not options.offline and result.output.startswith("Status"):
                return iter([_normal_record(path)])

        return StatusParser(result.output, options, self.lock_fetcher).parse()

    def get_status(self, path: str) -> StatusRecord:
        """Offline, non-recursive status of a single path.

        On error an invalid record (``is_valid`` False) with status
        UNVERSIONED is returned: callers leave paths they cannot see alone.
        """
        options = StatusOptions(depth=SearchDepth.EMPTY, timeout_ms=self.timeout_ms)
        return _first_or_unversioned(self.get_statuses(path, options))

    def has_conflicts_any(self, path: str) -> bool:
        """True if anything under *path* is in conflict."""
        args = ["status", "--depth=infinity", format_path(path)]
        result = self.runner.run(args, self.timeout_ms * CONFLICT_SCAN_FACTOR)
        if result.has_errors:
            self._handle_status_error(path, result.error)
            return False
        return _CONFLICT_SUMMARY in result.output

    def _handle_status_error(self, path: str, error: str) -> None:
        cli_path = self.config.svn.cli_path
        classification = self.classifiers[OperationFamily.STATUS].classify(
            error, custom_cli_path=bool(cli_path), cli_path=cli_path
        )
        critical = classification.outcome == StatusErrorOutcome.CRITICAL
        message = classification.message or (GENERIC_ERROR_MESSAGE if critical else "")
        if message:
            self.reporter.report(message, error, silent=self.state.silent)
        if critical:
            raise SvnCommandError("status", path, error)

    # ---- locks ----

    def fetch_lock_details(
        self, path: str, timeout_ms: Optional[int] = None, raise_error: bool = False
    ) -> LockDetails:
        """Ask the repository who holds the lock on *path*."""
        return self.lock_fetcher.fetch(path, timeout_ms or self.timeout_ms, raise_error)

    def lock_file(
        self,
        path: str,
        force: bool = False,
        message: str = "",
        encoding: str = "",
        timeout_ms: Optional[int] = None,
    ) -> LockOutcome:
        args = ["lock"]
        if force:
            args.append("--force")
        if message:
            args += ["--message", message]
        if encoding:
            args += ["--encoding", encoding]
        args.append(format_path(path))

        result = self.runner.run(args, timeout_ms or self.timeout_ms)
        return self._lock_outcome(OperationFamily.LOCK, path, result, force, "locked by user")

    def unlock_file(self, path: str, force: bool = False, timeout_ms: Optional[int] = None) -> LockOutcome:
        args = ["unlock"]
        if force:
            args.append("--force")
        args.append(format_path(path))

        result = self.runner.run(args, timeout_ms or self.timeout_ms)
        return self._lock_outcome(OperationFamily.UNLOCK, path, result, force, "unlocked")

    def _lock_outcome(
        self,
        family: OperationFamily,
        path: str,
        result: ShellResult,
        force: bool,
        success_marker: str,
    ) -> LockOutcome:
        if result.has_errors:
            classification = self.classifiers[family].classify(result.error, force=force)
            if not classification.matched:
                logger.error('Failed to %s "%s".\n\n%s', family.value, path, result.error)
            return classification.outcome

        if success_marker in result.output:
            return LockOutcome.SUCCESS

        logger.error('Failed to %s "%s".\n\n%s', family.value, path, result.output)
        return LockOutcome.FAILED

    # ---- update / commit ----

    def update(
        self,
        path: str,
        force: bool = False,
        revision: int = -1,
        timeout_ms: Optional[int] = None,
    ) -> UpdateOutcome:
        """Update *path* recursively.

        ``force`` resolves incoming adds over existing unversioned files.
        ``revision`` <= 0 means HEAD.
        """
        args = ["update", "--depth", SearchDepth.INFINITY.value]
        if force:
            args.append("--force")
        if revision > 0:
            args += ["--revision", str(revision)]
        args.append(format_path(path))

        result = self.runner.run(args, timeout_ms or self.timeout_ms * LONG_OPERATION_FACTOR)
        if result.has_errors:
            classification = self.classifiers[OperationFamily.UPDATE].classify(result.error)
            if not classification.matched:
                logger.error('Failed to update "%s".\n\n%s', path, result.error)
            return classification.outcome

        if _CONFLICT_SUMMARY in result.output and _has_remaining_conflicts(result.output):
            return UpdateOutcome.SUCCESS_WITH_CONFLICTS
        return UpdateOutcome.SUCCESS

    def commit(
        self,
        paths: Iterable[str],
        include_meta: bool = False,
        recursive: bool = False,
        message: str = "",
        encoding: str = "",
        keep_locks: bool = False,
        timeout_ms: Optional[int] = None,
    ) -> CommitOutcome:
        """Commit *paths*. Locks are released unless ``keep_locks`` is set."""
        paths = list(paths)
        if include_meta:
            paths = [p + self.config.meta.suffix for p in paths] + paths

        depth = SearchDepth.INFINITY if recursive else SearchDepth.EMPTY

        with tempfile.TemporaryDirectory(prefix="svnbridge-") as tmp:
            targets_file = Path(tmp) / "targets.txt"
            targets_file.write_text(
                "".join(f"{format_path(p)}\n" for p in paths), encoding="utf-8"
            )

            args = [
                "commit",
                "--targets", str(targets_file),
                "--depth", depth.value,
                "--message", message,
            ]
            if encoding:
                args += ["--encoding", encoding]
            if keep_locks:
                args.append("--no-unlock")

            result = self.runner.run(args, timeout_ms or self.timeout_ms * LONG_OPERATION_FACTOR)

        if result.has_errors:
            classification = self.classifiers[OperationFamily.COMMIT].classify(result.error)
            if not classification.matched:
                logger.error("Commit failed.\n\n%s", result.error)
            return classification.outcome

        return CommitOutcome.SUCCESS

    # ---- working copy changes ----

    def add(self, path: str, include_meta: bool = False, recursive: bool = False) -> bool:
        """Add *path* (and its unversioned parent folders) without prompting."""
        if not path:
            return True

        with self.state.silenced(), self._report() as report:
            if not self.check_and_add_parent_folder(path, report):
                return False

            depth = SearchDepth.INFINITY if recursive else SearchDepth.EMPTY
            for target in self._with_meta(path, include_meta):
                result = self._exec(report, ["add", "--depth", depth.value, "--force", format_path(target)])
                if result.has_errors:
                    return False
            return True

    def delete(self, path: str, include_meta: bool = False) -> bool:
        with self._report() as report:
            for target in self._with_meta(path, include_meta):
                if self._exec(report, ["delete", "--force", format_path(target)]).has_errors:
                    return False
            return True

    def move(self, old_path: str, new_path: str, include_meta: bool = False) -> bool:
        """Move a versioned path, adding the destination folder first if needed."""
        with self._report() as report:
            if not self.check_and_add_parent_folder(new_path, report):
                return False

            pairs = [(old_path, new_path)]
            if include_meta:
                suffix = self.config.meta.suffix
                pairs.append((old_path + suffix, new_path + suffix))
            for old, new in pairs:
                if self._exec(report, ["move", format_path(old), new]).has_errors:
                    return False
            return True

    def revert(self, path: str) -> bool:
        with self._report() as report:
            return not self._exec(report, ["revert", format_path(path)]).has_errors

    def replace_file(self, old_path: str, new_path: str, include_meta: bool = True) -> bool:
        """Put an unversioned file where svn has a deleted one, and add it.

        The file (and its meta) is moved on disk first; svn then records a
        replacement.
        """
        pairs = [(old_path, new_path)]
        if include_meta:
            suffix = self.config.meta.suffix
            pairs.append((old_path + suffix, new_path + suffix))

        for old, new in pairs:
            shutil.move(str(self.project_root / old), str(self.project_root / new))

        with self._report() as report:
            for _, new in pairs:
                if self._exec(report, ["add", format_path(new)]).has_errors:
                    return False
            return True

    def check_and_add_parent_folder(self, path: str, report: Optional[OperationReport] = None) -> bool:
        """Make sure the folder that will hold *path* is versioned and not conflicted."""
        directory = os.path.dirname(path) or "."

        status = self.get_status(directory)
        if status.is_conflicted:
            if self.state.silent or self.prompter.confirm(
                "Conflicted files",
                f'Failed to move the files to\n"{directory}"\nbecause it has conflicts. Resolve them first!',
                "Check changes",
                "Cancel",
            ):
                self._show_changes()
            return False

        if status.status == FileStatus.UNVERSIONED:
            if not self.state.silent and not self.prompter.confirm(
                "Unversioned directory",
                f'The target directory:\n"{directory}"\nis not under SVN control. Should it be added?',
                "Add it!",
                "Cancel",
            ):
                return False
            if not self.add_directory(directory, report):
                return False

        return True

    def add_directory(self, directory: str, report: Optional[OperationReport] = None) -> bool:
        """Add *directory* with all unversioned parents, plus their metas under a meta root."""
        if report is None:
            with self._report() as own_report:
                return self.add_directory(directory, own_report)

        args = ["add", "--parents", "--depth", SearchDepth.EMPTY.value, format_path(directory)]
        if self._exec(report, args).has_errors:
            return False

        roots = [r.lower() for r in self.config.meta.roots]
        if not any(directory.lower().startswith(root) for root in roots):
            return True

        suffix = self.config.meta.suffix
        meta = directory + suffix
        while self.get_status(meta).status == FileStatus.UNVERSIONED:
            if self._exec(report, ["add", format_path(meta)]).has_errors:
                return False
            parent = os.path.dirname(meta)
            if not parent:
                break
            meta = parent + suffix

        return True

    # ---- async ----

    def get_statuses_async(
        self,
        path: str,
        recursive: bool = False,
        offline: bool = True,
        fetch_lock_details: bool = True,
        timeout_ms: Optional[int] = None,
    ) -> AsyncOperation[List[StatusRecord]]:
        """Status query on a worker; the result is a list, lock details included."""
        options = StatusOptions(
            depth=SearchDepth.INFINITY if recursive else SearchDepth.EMPTY,
            offline=offline,
            fetch_lock_owner=fetch_lock_details,
            raise_error=False,
            timeout_ms=self._async_status_timeout(offline, timeout_ms),
        )
        return self._start(lambda: list(self.get_statuses(path, options)))

    def get_status_async(
        self,
        path: str,
        offline: bool = True,
        fetch_lock_details: bool = True,
        timeout_ms: Optional[int] = None,
    ) -> AsyncOperation[StatusRecord]:
        options = StatusOptions(
            depth=SearchDepth.EMPTY,
            offline=offline,
            fetch_lock_owner=fetch_lock_details,
            raise_error=False,
            timeout_ms=self._async_status_timeout(offline, timeout_ms),
        )
        return self._start(lambda: _first_or_unversioned(self.get_statuses(path, options)))

    def fetch_lock_details_async(self, path: str, timeout_ms: Optional[int] = None) -> AsyncOperation[LockDetails]:
        return self._start(self.fetch_lock_details, path, timeout_ms, False)

    def lock_file_async(
        self,
        path: str,
        force: bool = False,
        message: str = "",
        encoding: str = "",
        timeout_ms: Optional[int] = None,
    ) -> AsyncOperation[LockOutcome]:
        return self._start(self.lock_file, path, force, message, encoding, timeout_ms)

    def unlock_file_async(
        self, path: str, force: bool = False, timeout_ms: Optional[int] = None
    ) -> AsyncOperation[LockOutcome]:
        return self._start(self.unlock_file, path, force, timeout_ms)

    def update_async(
        self,
        path: str,
        force: bool = False,
        revision: int = -1,
        timeout_ms: Optional[int] = None,
    ) -> AsyncOperation[UpdateOutcome]:
        return self._start(self.update, path, force, revision, timeout_ms)

    def commit_async(
        self,
        paths: Iterable[str],
        include_meta: bool = False,
        recursive: bool = False,
        message: str = "",
        encoding: str = "",
        keep_locks: bool = False,
        timeout_ms: Optional[int] = None,
    ) -> AsyncOperation[CommitOutcome]:
        return self._start(
            self.commit, list(paths), include_meta, recursive, message, encoding, keep_locks, timeout_ms
        )

    # ---- helpers ----

    def _start(self, fn, *args) -> AsyncOperation:
        scheduler = self.scheduler or get_default_scheduler()
        return scheduler.start(fn, *args)

    def _async_status_timeout(self, offline: bool, timeout_ms: Optional[int]) -> int:
        if timeout_ms is not None:
            return timeout_ms
        # online queries wait on the server
        return self.timeout_ms if offline else self.timeout_ms * 2

    def _report(self) -> OperationReport:
        return OperationReport(
            self.reporter,
            trace=self.config.svn.trace_operations,
            silent=self.state.silent,
        )

    def _exec(self, report: OperationReport, args: List[str]) -> ShellResult:
        return report.run(self.runner, args, self.timeout_ms)

    def _with_meta(self, path: str, include_meta: bool) -> List[str]:
        return [path, path + self.config.meta.suffix] if include_meta else [path]

    def _show_changes(self) -> None:
        if self.on_show_changes is not None:
            self.on_show_changes()


def _normal_record(path: str) -> StatusRecord:
    return StatusRecord(status=FileStatus.NORMAL, path=path)


def _first_or_unversioned(records: Iterator[StatusRecord]) -> StatusRecord:
    record = next(iter(records), StatusRecord())
    if not record.is_valid:
        record = replace(record, status=FileStatus.UNVERSIONED)
    return record


def _has_remaining_conflicts(output: str) -> bool:
    return any(int(count) > 0 for count in _CONFLICT_COUNT_RE.findall(output))
