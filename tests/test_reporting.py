"""Tests for error notification and operation transcripts."""

import logging

from svnbridge.reporting import GENERIC_ERROR_MESSAGE, ErrorReporter, OperationReport
from svnbridge.svn.adapter import ShellResult

from conftest import FakeRunner


class TestErrorReporter:
    def test_notifies_once_per_message(self):
        shown = []
        reporter = ErrorReporter(notifier=shown.append)
        assert reporter.report("A") is True
        assert reporter.report("A") is False
        assert reporter.report("B") is True
        assert reporter.report("A") is True
        assert shown == ["A", "B", "A"]

    def test_silent_only_logs(self, caplog):
        shown = []
        reporter = ErrorReporter(notifier=shown.append)
        with caplog.at_level(logging.ERROR):
            assert reporter.report("A", "svn: E1", silent=True) is False
        assert shown == []
        assert "svn: E1" in caplog.text
        assert reporter.last_displayed == ""

    def test_reset(self):
        shown = []
        reporter = ErrorReporter(notifier=shown.append)
        reporter.report("A")
        reporter.reset()
        reporter.report("A")
        assert shown == ["A", "A"]


class TestOperationReport:
    def test_failure_reported_with_transcript(self, caplog):
        shown = []
        reporter = ErrorReporter(notifier=shown.append)
        runner = FakeRunner(ShellResult(output="A  Foo\n"), ShellResult(error="svn: E150002: boom"))
        with caplog.at_level(logging.ERROR):
            with OperationReport(reporter) as report:
                report.run(runner, ["add", "Foo@"], 1000)
                report.run(runner, ["add", "Foo.meta@"], 1000)
        assert shown == [GENERIC_ERROR_MESSAGE]
        assert "SVN Operations:" in caplog.text
        assert "add Foo.meta@" in caplog.text
        assert "svn: E150002: boom" in caplog.text

    def test_output_streamed_into_transcript(self):
        runner = FakeRunner(ShellResult(output="A  Assets\nA  Assets/Foo.png\n"))
        reporter = ErrorReporter(notifier=lambda m: None)
        with OperationReport(reporter) as report:
            report.run(runner, ["add", "Assets@"], 1000)
        assert report.lines == ["SVN Operations:", "add Assets@", "A  Assets", "A  Assets/Foo.png"]

    def test_last_result_decides(self):
        shown = []
        reporter = ErrorReporter(notifier=shown.append)
        runner = FakeRunner(ShellResult(error="svn: E1"), ShellResult(output="A  Bar\n"))
        with OperationReport(reporter) as report:
            report.run(runner, ["add", "Foo@"], 1000)
            report.run(runner, ["add", "Bar@"], 1000)
        assert shown == []

    def test_trace_logs_success(self, caplog):
        reporter = ErrorReporter(notifier=lambda m: None)
        runner = FakeRunner(ShellResult(output="Reverted 'Foo'\n"))
        with caplog.at_level(logging.INFO):
            with OperationReport(reporter, trace=True) as report:
                report.run(runner, ["revert", "Foo@"], 1000)
        assert "revert Foo@" in caplog.text
        assert "Reverted 'Foo'" in caplog.text

    def test_silent_report(self):
        shown = []
        reporter = ErrorReporter(notifier=shown.append)
        with OperationReport(reporter, silent=True) as report:
            report.run(FakeRunner(ShellResult(error="svn: E1")), ["add", "Foo@"], 1000)
        assert shown == []
