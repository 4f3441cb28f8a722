"""
Adapter between the NSQ client's logger interface and fishlog.

The NSQ client prefixes each log line with a three-letter level tag
(``DBG``, ``INF``, ``WRN``, ``ERR``) and hands it to ``output(call_depth,
message)``. ``NSQLogger`` decodes the tag and re-emits the rest of the line
at the matching level on an Entry tagged ``component="nsq"``. Clients that log
through stdlib ``logging`` instead (``pynsq`` uses the ``"nsq"`` logger) are
routed with ``intercept_nsq_logging``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .interceptors import intercept_logger
from .levels import QueueLogLevel

if TYPE_CHECKING:
    from .entry import Entry

TAG_LENGTH = 3


class NSQLogger:
    def __init__(self, entry: "Entry") -> None:
        self.entry = entry

    def output(self, call_depth: int, message: str) -> None:
        """Emit ``message`` at the level named by its tag.

        Untagged lines are emitted at INFO; lines no longer than a tag are
        dropped. Never raises on malformed input.
        """
        if len(message) <= TAG_LENGTH:
            return
        text = message[TAG_LENGTH:].strip()
        level = QueueLogLevel.from_tag(message[:TAG_LENGTH])
        if level == QueueLogLevel.DEBUG:
            self.entry.debug(text)
        elif level == QueueLogLevel.INFO:
            self.entry.info(text)
        elif level == QueueLogLevel.WARNING:
            self.entry.warning(text)
        elif level == QueueLogLevel.ERROR:
            self.entry.error(text)
        else:
            self.entry.info(text)


def intercept_nsq_logging(adapter: NSQLogger, name: str = "nsq") -> logging.Logger:
    """Send the stdlib logger used by the NSQ client through ``adapter``."""
    return intercept_logger(name, adapter.entry)
