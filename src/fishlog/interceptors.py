"""
Interceptors for capturing standard library logging from third-party clients.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .levels import Severity

if TYPE_CHECKING:
    from .entry import Entry


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging records into a fishlog Entry.

    Records keep their level (CRITICAL is capped at ERROR) and are emitted with
    the entry's fields plus ``logger`` naming the stdlib logger they came from.
    """

    def __init__(self, entry: "Entry", level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.entry = entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = record.getMessage()
            severity = Severity.from_levelno(record.levelno)
            entry = self.entry.with_field("logger", record.name)
            if record.exc_info and record.exc_info[1] is not None:
                entry = entry.with_error(record.exc_info[1])
            getattr(entry, severity.method_name)(msg)
        except Exception:
            self.handleError(record)


def intercept_logger(name: str, entry: "Entry") -> logging.Logger:
    """Route the named stdlib logger, and its children, into ``entry``.

    Existing handlers are removed and propagation to the root logger is
    disabled so records are not emitted twice.
    """
    lg = logging.getLogger(name)
    lg.handlers = [RedirectStdLibHandler(entry)]
    lg.propagate = False
    return lg
