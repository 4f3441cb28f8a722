"""
Error-reporting hook tests.

The reporter is replaced with an in-memory double; see test_reporting.py for
the Bugsnag client itself.
"""

from __future__ import annotations

import traceback as tb_module

import pytest

from fishlog import ErrorReportingError, ErrorReportingHook, Logger, ReportedError, Severity, WrappedError
from fishlog.hooks import ERROR_LEVELS, capture_traceback


class FakeReporter:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[dict] = []

    def notify(self, error, *, traceback, metadata) -> None:
        self.calls.append({"error": error, "traceback": traceback, "metadata": metadata})
        if self.fail:
            raise ConnectionError("bugsnag unreachable")


@pytest.fixture
def reporter() -> FakeReporter:
    return FakeReporter()


@pytest.fixture
def reporting_log(log: Logger, reporter: FakeReporter) -> Logger:
    log.add_hook(ErrorReportingHook(reporter))
    return log


class TestLevels:
    def test_error_and_above(self) -> None:
        assert ErrorReportingHook(FakeReporter()).levels == ERROR_LEVELS
        assert ERROR_LEVELS == {Severity.ERROR, Severity.FATAL, Severity.PANIC}

    def test_warning_is_not_reported(self, reporting_log: Logger, reporter: FakeReporter) -> None:
        reporting_log.warning("not yet a problem")
        assert reporter.calls == []

    def test_fatal_is_reported(self, reporting_log: Logger, reporter: FakeReporter, captured) -> None:
        reporting_log.fatal("going down")
        assert len(reporter.calls) == 1
        assert captured.exit_codes == [1]


class TestReportableError:
    def test_error_with_message_is_wrapped(self, reporting_log: Logger, reporter: FakeReporter) -> None:
        cause = TimeoutError("db timed out")
        reporting_log.with_error(cause).error("saving catch")

        error = reporter.calls[0]["error"]
        assert isinstance(error, WrappedError)
        assert str(error) == "saving catch: db timed out"
        assert error.__cause__ is cause
        assert error.unwrap() is cause

    def test_error_without_message_is_reported_as_is(self, reporting_log: Logger, reporter: FakeReporter) -> None:
        cause = TimeoutError("db timed out")
        reporting_log.with_error(cause).error("")
        assert reporter.calls[0]["error"] is cause

    def test_message_only(self, reporting_log: Logger, reporter: FakeReporter) -> None:
        reporting_log.error("quota exceeded")
        error = reporter.calls[0]["error"]
        assert type(error) is ReportedError
        assert str(error) == "quota exceeded"

    def test_non_exception_error_field_is_metadata(self, reporting_log: Logger, reporter: FakeReporter) -> None:
        reporting_log.with_field("error", "just a string").error("odd")
        call = reporter.calls[0]
        assert type(call["error"]) is ReportedError
        assert call["metadata"] == {"metadata": {}}


class TestMetadata:
    def test_fields_except_error(self, reporting_log: Logger, reporter: FakeReporter) -> None:
        reporting_log.with_error(ValueError("x")).with_user(7).with_channel("fcm").error("push failed")
        assert reporter.calls[0]["metadata"] == {"metadata": {"user_id": 7, "channel": "fcm"}}


class TestStackCapture:
    def test_innermost_frame_is_the_logging_call(self, reporting_log: Logger, reporter: FakeReporter) -> None:
        reporting_log.new_entry().error("from entry")
        reporting_log.error("from logger")

        for call in reporter.calls:
            innermost = tb_module.extract_tb(call["traceback"])[-1]
            assert innermost.name == "test_innermost_frame_is_the_logging_call"
            assert innermost.filename.endswith("test_hooks.py")

    def test_capture_traceback_skips_frames(self) -> None:
        def inner():
            return capture_traceback(1)

        frames = tb_module.extract_tb(inner())
        assert frames[-1].name == "test_capture_traceback_skips_frames"

    def test_capture_traceback_beyond_stack(self) -> None:
        assert capture_traceback(10_000) is None


class TestSubmissionFailure:
    def test_failure_propagates_to_emit_call(self, log: Logger, captured) -> None:
        log.add_hook(ErrorReportingHook(FakeReporter(fail=True)))

        with pytest.raises(ErrorReportingError) as excinfo:
            log.error("cannot report")

        assert isinstance(excinfo.value.__cause__, ConnectionError)
        assert captured.last()["message"] == "cannot report"
