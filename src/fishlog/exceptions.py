"""
fishlog exception hierarchy.

Errors raised by the library itself (``FishlogError`` and subclasses) are kept
apart from the exceptions it builds for the error-reporting service
(``ReportedError`` and ``WrappedError``), which are never raised.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


class FishlogError(Exception):
    """Root of all exceptions raised by fishlog."""


class ErrorReportingError(FishlogError):
    """Submitting a record to the error-reporting service failed.

    Raised from the emit call that triggered the hook, after the record has
    been written to the sink.
    """


class LogPanic(FishlogError):
    """Raised by ``Entry.panic`` after the record has been written."""

    def __init__(self, message: str, fields: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = dict(fields or {})


# ================================
# Reported errors
# Built by the error-reporting hook, handed to the reporter, never raised
# ================================


class ReportedError(Exception):
    """An error record that carried no exception, only a message."""


class WrappedError(Exception):
    """An exception prefixed with the log message that reported it.

    ``str()`` renders as ``"<message>: <error>"`` and ``__cause__`` points at
    the wrapped exception so the original class can be recovered.
    """

    def __init__(self, message: str, error: BaseException) -> None:
        super().__init__(f"{message}: {error}")
        self.message = message
        self.__cause__ = error

    def unwrap(self) -> BaseException:
        return self.__cause__  # type: ignore[return-value]
