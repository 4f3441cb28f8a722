"""
Logger handles and process-wide initialization.

A ``Logger`` owns the minimum severity, the sink and the hooks; it hands out
root ``Entry`` objects. Services may construct and inject their own handle,
or use ``init()`` once at startup and ``get_logger()`` afterwards.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Iterable, Mapping, Optional

from opentelemetry.context import Context

from .config import LoggingSettings
from .entry import Entry
from .exceptions import ErrorReportingError
from .formatters import build_processors
from .hooks import ErrorReportingHook, Hook, Record
from .levels import QueueLogLevel, Severity, parse_level, to_queue_level
from .nsq import NSQLogger
from .sinks import BaseSink, StreamSink

# =============================================================================
# Global State
# =============================================================================

_log: Optional["Logger"] = None


class Logger:
    """Entry point for structured logging.

    Emission is thread-safe. Changing ``level`` or the sink while other
    threads emit is not synchronised; callers serialise such swaps.
    """

    def __init__(
        self,
        level: Severity = Severity.INFO,
        sink: Optional[BaseSink] = None,
        hooks: Iterable[Hook] = (),
        exit_func: Callable[[int], Any] = sys.exit,
        raw_durations: bool = False,
    ) -> None:
        self.level = level
        self.sink = sink or StreamSink()
        self.hooks: list[Hook] = list(hooks)
        self.exit_func = exit_func
        self.raw_durations = raw_durations
        self._processors = build_processors()

    @classmethod
    def from_settings(cls, settings: LoggingSettings, *, with_error_reporting: bool = True) -> "Logger":
        """Build a JSON logger from settings.

        With error reporting enabled in both the call and the settings, the
        Bugsnag client is configured and the error-reporting hook registered.
        Bugsnag's own diagnostics go to a hook-less twin of this logger.
        """
        logger = cls(level=parse_level(settings.level), raw_durations=settings.raw_durations)
        if with_error_reporting and settings.error_reporting_enabled:
            from .reporting import BugsnagReporter, configure_bugsnag

            diagnostics = DiagnosticsLogger(logger)
            configure_bugsnag(settings, diagnostics=diagnostics)
            logger.add_hook(ErrorReportingHook(BugsnagReporter(diagnostics=diagnostics)))
        return logger

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_level(self, level: Severity) -> None:
        self.level = level

    def set_output(self, stream: Any) -> None:
        """Redirect records to a text stream."""
        previous, self.sink = self.sink, StreamSink(stream)
        previous.close()

    def add_hook(self, hook: Hook) -> None:
        self.hooks.append(hook)

    def is_enabled_for(self, severity: Severity) -> bool:
        return severity >= self.level

    # =========================================================================
    # Entries
    # =========================================================================

    def new_entry(self) -> Entry:
        return Entry(self, self._processors, {})

    def with_field(self, key: str, value: Any) -> Entry:
        return self.new_entry().with_field(key, value)

    def with_fields(self, fields: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Entry:
        return self.new_entry().with_fields(fields, **kwargs)

    def with_error(self, error: BaseException) -> Entry:
        return self.new_entry().with_error(error)

    def with_trace_context(self, ctx: Optional[Context] = None) -> Entry:
        return self.new_entry().with_trace_context(ctx)

    def nsq_logger(self) -> tuple[NSQLogger, QueueLogLevel]:
        """Adapter and level to register with the NSQ client."""
        return NSQLogger(self.new_entry().with_field("component", "nsq")), to_queue_level(self.level)

    # =========================================================================
    # Emission
    # =========================================================================

    def debug(self, message: str, *args: Any) -> None:
        self.new_entry()._log(Severity.DEBUG, message, args)

    def info(self, message: str, *args: Any) -> None:
        self.new_entry()._log(Severity.INFO, message, args)

    def warning(self, message: str, *args: Any) -> None:
        self.new_entry()._log(Severity.WARNING, message, args)

    warn = warning

    def error(self, message: str, *args: Any) -> None:
        self.new_entry()._log(Severity.ERROR, message, args)

    def fatal(self, message: str, *args: Any) -> None:
        self.new_entry()._log(Severity.FATAL, message, args)

    def panic(self, message: str, *args: Any) -> None:
        self.new_entry()._log(Severity.PANIC, message, args)

    def fire_hooks(self, record: Record) -> Optional[ErrorReportingError]:
        """Fire every hook registered for the record's severity.

        All hooks run even if one fails; the first failure is returned so the
        emitting call can raise it once the record is written.
        """
        failure: Optional[ErrorReportingError] = None
        for hook in self.hooks:
            if record.severity not in hook.levels:
                continue
            try:
                hook.fire(record)
            except ErrorReportingError as exc:
                if failure is None:
                    failure = exc
        return failure

    def write(self, line: str) -> None:
        self.sink.write(line)


class DiagnosticsLogger(Logger):
    """Hook-less logger that follows its parent's level and sink.

    Used for the error reporter's own log lines, which must not fire the
    reporting hook again. It is configured through the parent: its
    ``set_level`` and ``set_output`` apply here as well.
    """

    def __init__(self, parent: Logger) -> None:
        self.parent = parent
        self.hooks = []
        self.exit_func = parent.exit_func
        self.raw_durations = parent.raw_durations
        self._processors = parent._processors

    @property  # type: ignore[override]
    def level(self) -> Severity:
        return self.parent.level

    @property  # type: ignore[override]
    def sink(self) -> BaseSink:
        return self.parent.sink


# =============================================================================
# Process-wide Logger
# =============================================================================


def init(settings: Optional[LoggingSettings] = None) -> Logger:
    """Create the process-wide logger once.

    Later calls return the existing logger and ignore their settings. Not
    thread-safe: call it during startup, before any concurrent use.
    """
    global _log
    if _log is None:
        _log = Logger.from_settings(settings or LoggingSettings())
    return _log


def get_logger() -> Logger:
    """Return the process-wide logger, initializing it from the environment."""
    return init()


def reset() -> None:
    """Forget the process-wide logger so ``init()`` configures a new one."""
    global _log
    _log = None
