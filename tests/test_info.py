"""Tests for svn info scraping and the lock-owner lookup."""

from svnbridge.reporting import ErrorReporter
from svnbridge.state import IntegrationState
from svnbridge.svn.adapter import ShellResult
from svnbridge.svn.info import LockDetailsFetcher, extract_line_value, extract_lock_comment
from svnbridge.svn.models import LockDetails

from conftest import FakeRunner

URL = "https://svn.example.com/repo/trunk/Assets/Hero.psd"


class TestExtractLineValue:
    def test_value_up_to_line_break(self):
        text = "Path: Hero.psd\nURL: https://a/b\nRevision: 3\n"
        assert extract_line_value("URL:", text) == "https://a/b"

    def test_trailing_carriage_return_stripped(self):
        text = "Path: Hero.psd\r\nURL: https://a/b\r\nRevision: 3\r\n"
        assert extract_line_value("URL:", text) == "https://a/b"

    def test_last_line_without_newline(self):
        assert extract_line_value("Revision:", "Path: x\nRevision: 42") == "42"

    def test_label_absent(self):
        assert extract_line_value("Lock Owner:", "Path: x\nURL: y\n") == ""

    def test_case_insensitive(self):
        assert extract_line_value("url:", "URL: https://a/b\n") == "https://a/b"

    def test_first_occurrence_wins(self):
        text = "URL: https://a/b\nRelative URL: ^/b\n"
        assert extract_line_value("URL:", text) == "https://a/b"


class TestExtractLockComment:
    def test_comment_lines(self, sample_info_locked: str):
        assert extract_lock_comment(sample_info_locked) == "Repainting the hero\n"

    def test_no_comment_section(self, sample_info_unlocked: str):
        assert extract_lock_comment(sample_info_unlocked) == ""


class TestLockDetailsFetcher:
    def _fetcher(self, runner, notifications, state=None):
        reporter = ErrorReporter(notifier=notifications.append)
        return LockDetailsFetcher(runner, reporter, state or IntegrationState())

    def test_locked(self, sample_info_unlocked: str, sample_info_locked: str):
        runner = FakeRunner(
            ShellResult(output=sample_info_unlocked),
            ShellResult(output=sample_info_locked),
        )
        details = self._fetcher(runner, []).fetch("Assets/Hero.psd", 1000)

        assert runner.args == [
            ["info", "Assets/Hero.psd@"],
            ["info", URL + "@"],
        ]
        assert details.path == "Assets/Hero.psd"
        assert details.owner == "alice"
        assert details.date.startswith("2024-03-02 10:15:00")
        assert details.message == "Repainting the hero\n"
        assert details.is_locked

    def test_not_locked(self, sample_info_unlocked: str):
        runner = FakeRunner(
            ShellResult(output=sample_info_unlocked),
            ShellResult(output=sample_info_unlocked),
        )
        details = self._fetcher(runner, []).fetch("Assets/Hero.psd")
        assert details == LockDetails(path="Assets/Hero.psd")
        assert not details.is_empty
        assert not details.is_locked

    def test_working_copy_info_fails(self):
        notifications = []
        runner = FakeRunner(ShellResult(error="svn: E155007: '/tmp/x' is not a working copy"))
        details = self._fetcher(runner, notifications).fetch("x", raise_error=True)

        assert details is LockDetails.EMPTY
        assert len(runner.calls) == 1
        assert len(notifications) == 1
        assert notifications[0].startswith('Failed to get info for "x".')

    def test_repository_info_fails(self, sample_info_unlocked: str):
        notifications = []
        runner = FakeRunner(
            ShellResult(output=sample_info_unlocked),
            ShellResult(error="svn: E170013: Unable to connect to a repository"),
        )
        details = self._fetcher(runner, notifications).fetch("Assets/Hero.psd", raise_error=True)
        assert details.is_empty
        assert notifications[0].startswith('Failed to get lock details for "Assets/Hero.psd".')

    def test_failure_quiet_without_raise_error(self):
        notifications = []
        runner = FakeRunner(ShellResult(error="svn: E155007: not a working copy"))
        details = self._fetcher(runner, notifications).fetch("x", raise_error=False)
        assert details.is_empty
        assert notifications == []

    def test_failure_quiet_while_silenced(self):
        notifications = []
        state = IntegrationState()
        runner = FakeRunner(ShellResult(error="svn: E155007: not a working copy"))
        fetcher = self._fetcher(runner, notifications, state)
        with state.silenced():
            fetcher.fetch("x", raise_error=True)
        assert notifications == []

    def test_callable(self, sample_info_unlocked: str):
        runner = FakeRunner(
            ShellResult(output=sample_info_unlocked),
            ShellResult(output=sample_info_unlocked),
        )
        fetcher = self._fetcher(runner, [])
        assert fetcher("Assets/Hero.psd", 500, False).path == "Assets/Hero.psd"
        assert [call[1] for call in runner.calls] == [500, 500]
