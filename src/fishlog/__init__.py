"""
Structured logging for Fishbrain services.

Provides one field vocabulary and one JSON line format for:
- application logs: chainable, immutable ``Entry`` records
- error reporting: ERROR and above forwarded to Bugsnag through a hook
- the NSQ client: an adapter for its logger interface

Library: structlog (record building and processor chain) + orjson (JSON).
"""

from .config import LoggingSettings
from .core import Logger, get_logger, init, reset
from .entry import Entry
from .exceptions import ErrorReportingError, FishlogError, LogPanic, ReportedError, WrappedError
from .hooks import ErrorReporter, ErrorReportingHook, Hook, Record
from .levels import QueueLogLevel, Severity, parse_level, to_queue_level
from .nsq import NSQLogger, intercept_nsq_logging

__all__ = [
    "Entry",
    "ErrorReporter",
    "ErrorReportingError",
    "ErrorReportingHook",
    "FishlogError",
    "Hook",
    "intercept_nsq_logging",
    "get_logger",
    "init",
    "Logger",
    "LoggingSettings",
    "LogPanic",
    "NSQLogger",
    "parse_level",
    "QueueLogLevel",
    "Record",
    "ReportedError",
    "reset",
    "Severity",
    "to_queue_level",
    "WrappedError",
]
