"""
Log sink abstraction and the stream sink.
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import Any


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    @abstractmethod
    def write(self, line: str) -> None:
        """Write one rendered record."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the sink and release resources."""
        ...


class StreamSink(BaseSink):
    """Writes one record per line to a text stream.

    Records from concurrent threads never interleave: each line is written and
    flushed under the sink's lock.

    Args:
        stream: Output stream (default: stderr)
    """

    def __init__(self, stream: Any = None):
        self._stream = stream or sys.stderr
        self._lock = threading.Lock()

    @property
    def stream(self) -> Any:
        return self._stream

    def write(self, line: str) -> None:
        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()

    def close(self) -> None:
        pass
