"""
Severity vocabularies and the mappings between them.

fishlog speaks three dialects of "how bad is it":

- ``Severity``: fishlog's own ordered levels (DEBUG..PANIC), numbered like the
  stdlib ``logging`` levels so they compare with ``LogRecord.levelno``.
- configuration strings (``"ERROR"``, ``"WARNING"``, ``"INFO"``, ``"DEBUG"``).
- ``QueueLogLevel``: the NSQ client's levels and their three-letter tags.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional


class Severity(IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    FATAL = 50
    PANIC = 60

    @property
    def method_name(self) -> str:
        """Lowercase name used as the emit method and the ``level`` field."""
        return self.name.lower()

    @classmethod
    def from_levelno(cls, levelno: int) -> "Severity":
        """Map a stdlib ``logging`` level number onto a non-terminal severity.

        CRITICAL records become ERROR: a third-party library must never be
        able to terminate the process through fishlog.
        """
        if levelno < logging.INFO:
            return cls.DEBUG
        if levelno < logging.WARNING:
            return cls.INFO
        if levelno < logging.ERROR:
            return cls.WARNING
        return cls.ERROR


class QueueLogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    def __str__(self) -> str:
        return _QUEUE_TAGS[self]

    @classmethod
    def from_tag(cls, tag: str) -> Optional["QueueLogLevel"]:
        """Resolve a three-letter tag such as ``"WRN"``; ``None`` if unknown."""
        return _QUEUE_LEVELS_BY_TAG.get(tag)


# Serialisation used by the NSQ client when prefixing its own log lines.
_QUEUE_TAGS = {
    QueueLogLevel.DEBUG: "DBG",
    QueueLogLevel.INFO: "INF",
    QueueLogLevel.WARNING: "WRN",
    QueueLogLevel.ERROR: "ERR",
}
_QUEUE_LEVELS_BY_TAG = {tag: level for level, tag in _QUEUE_TAGS.items()}

_CONFIG_LEVELS = {
    "ERROR": Severity.ERROR,
    "WARNING": Severity.WARNING,
    "INFO": Severity.INFO,
    "DEBUG": Severity.DEBUG,
}

DEFAULT_SEVERITY = Severity.INFO
DEFAULT_QUEUE_LEVEL = QueueLogLevel.INFO


def parse_level(value: Optional[str]) -> Severity:
    """Parse a configured level name.

    The match is exact and case-sensitive. Unknown names, including the
    empty string and lowercase spellings, fall back to INFO instead of
    raising: a typo in configuration must not take logging down.
    """
    severity = _CONFIG_LEVELS.get(value or "")
    if severity is None:
        return DEFAULT_SEVERITY
    return severity


def to_queue_level(severity: Severity) -> QueueLogLevel:
    """Translate a severity into the NSQ client's level.

    The client has no fatal or panic level, so everything from ERROR up
    collapses onto ERROR.
    """
    if severity == Severity.DEBUG:
        return QueueLogLevel.DEBUG
    if severity == Severity.INFO:
        return QueueLogLevel.INFO
    if severity == Severity.WARNING:
        return QueueLogLevel.WARNING
    if severity in (Severity.ERROR, Severity.FATAL, Severity.PANIC):
        return QueueLogLevel.ERROR
    return DEFAULT_QUEUE_LEVEL
