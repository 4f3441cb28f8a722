"""
Hooks: side effects fired synchronously for qualifying records.

A Logger keeps a list of hooks; when a record is emitted, every hook whose
``levels`` include the record's severity is fired before the record is
written. ``ErrorReportingHook`` forwards error records to an error tracking
service through an ``ErrorReporter``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Mapping, Optional, Protocol

from .exceptions import ErrorReportingError, ReportedError, WrappedError
from .formatters import ERROR_KEY
from .levels import Severity

# fire -> Logger.fire_hooks -> Entry._log -> Entry.<level>
DEFAULT_SKIP_FRAMES = 4

ERROR_LEVELS = frozenset({Severity.ERROR, Severity.FATAL, Severity.PANIC})


@dataclass(frozen=True)
class Record:
    """What a hook sees of an emitted record."""

    severity: Severity
    message: str
    fields: Mapping[str, Any]
    time_ns: int


class Hook(Protocol):
    levels: frozenset

    def fire(self, record: Record) -> None:
        """Handle ``record``; raise ``ErrorReportingError`` on failure."""
        ...


class ErrorReporter(Protocol):
    def notify(
        self,
        error: BaseException,
        *,
        traceback: Optional[TracebackType],
        metadata: dict[str, dict[str, Any]],
    ) -> None:
        ...


def capture_traceback(skip: int) -> Optional[TracebackType]:
    """Build a traceback of the current stack, dropping the innermost frames.

    ``skip`` counts the innermost frames to drop, starting with the caller
    of this function. Returns ``None`` if the stack is not that deep.
    """
    try:
        frame = sys._getframe(skip + 1)
    except ValueError:
        return None
    tb: Optional[TracebackType] = None
    while frame is not None:
        tb = TracebackType(tb, frame, frame.f_lasti, frame.f_lineno)
        frame = frame.f_back
    return tb


def build_reportable_error(record: Record) -> BaseException:
    error = record.fields.get(ERROR_KEY)
    if isinstance(error, BaseException):
        if record.message:
            return WrappedError(record.message, error)
        return error
    return ReportedError(record.message)


def build_metadata(record: Record) -> dict[str, dict[str, Any]]:
    return {"metadata": {key: value for key, value in record.fields.items() if key != ERROR_KEY}}


class ErrorReportingHook:
    """Reports ERROR, FATAL and PANIC records to an error tracking service."""

    levels = ERROR_LEVELS

    def __init__(self, reporter: ErrorReporter, skip_frames: int = DEFAULT_SKIP_FRAMES) -> None:
        self.reporter = reporter
        self.skip_frames = skip_frames

    def fire(self, record: Record) -> None:
        error = build_reportable_error(record)
        traceback = capture_traceback(self.skip_frames)
        try:
            self.reporter.notify(error, traceback=traceback, metadata=build_metadata(record))
        except Exception as exc:
            raise ErrorReportingError(f"failed to report error: {exc}") from exc
