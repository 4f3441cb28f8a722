"""
Chainable structured log entries.

An ``Entry`` is a structlog bound logger whose context is the record's field
set. Every ``with_*`` call binds a new field and returns a new ``Entry``; the
receiver is never modified, so a partially built entry can be shared between
threads and extended independently by each of them::

    entry = log.new_entry().with_user(10)
    entry.with_channel("fcm").info("push sent")
    entry.with_event("purchase,42").warning("slow purchase")
"""

from __future__ import annotations

import re
import time
from datetime import timedelta
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from opentelemetry.context import Context
from structlog import BoundLoggerBase

from .exceptions import LogPanic
from .formatters import EMITTER_SLOTS, ERROR_KEY, MESSAGE_SLOT, TIME_SLOT, shelter_emitter_slots
from .hooks import Record
from .levels import Severity
from .tracing import active_span_ids

if TYPE_CHECKING:
    from .core import Logger

Duration = Union[timedelta, int]

_NANOS_PER_MILLI = 1_000_000
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def _parse_int(text: str) -> int:
    """Parse a decimal id the way event producers emit them.

    Anything that is not a plain signed decimal yields 0; values beyond the
    64-bit range are clamped to it.
    """
    if not _DECIMAL.fullmatch(text):
        return 0
    return max(_INT64_MIN, min(_INT64_MAX, int(text)))


def _nanoseconds(d: Duration) -> int:
    if isinstance(d, timedelta):
        return (d.days * 86_400 + d.seconds) * 1_000_000_000 + d.microseconds * 1_000
    if isinstance(d, int) and not isinstance(d, bool):
        return d
    raise TypeError(f"duration must be a timedelta or nanoseconds as int, got {type(d).__name__}")


def round_to_milliseconds(d: Duration) -> int:
    """Round a duration to whole milliseconds, halves away from zero."""
    nanos = _nanoseconds(d)
    millis, remainder = divmod(abs(nanos), _NANOS_PER_MILLI)
    if remainder * 2 >= _NANOS_PER_MILLI:
        millis += 1
    return millis if nanos >= 0 else -millis


def _format_message(message: str, args: tuple) -> str:
    """%-format the message, keeping the raw text when the arguments do not fit.

    ``"%d items" % ("x",)`` renders as ``%d items %!(BADARGS 'x')``.
    """
    try:
        return message % args
    except (TypeError, ValueError, KeyError):
        return f"{message} %!(BADARGS {', '.join(repr(arg) for arg in args)})"


class Entry(BoundLoggerBase):
    """Immutable structured log record builder bound to a ``Logger``."""

    _logger: "Logger"

    @property
    def owner(self) -> "Logger":
        return self._logger

    @property
    def fields(self) -> Mapping[str, Any]:
        """Read-only view of the bound field set."""
        return MappingProxyType(self._context)

    # =========================================================================
    # Enrichment
    # =========================================================================

    def _extend(self, values: Mapping[str, Any]) -> "Entry":
        # Not bind(): keys travel as a mapping, so any string is a valid field name.
        context = dict(self._context)
        context.update(values)
        return type(self)(self._logger, self._processors, context)

    def with_field(self, key: str, value: Any) -> "Entry":
        return self._extend({key: value})

    def with_fields(self, fields: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Entry":
        merged = dict(fields or {})
        merged.update(kwargs)
        return self._extend(merged)

    def with_string_field_ignore_empty(self, key: str, value: str) -> "Entry":
        """Bind ``key`` unless ``value`` is empty or only whitespace."""
        if value.strip():
            return self.with_field(key, value)
        return self

    def with_service(self, name: str) -> "Entry":
        return self.with_field("service", name)

    def with_user(self, user_id: int) -> "Entry":
        return self.with_field("user_id", user_id)

    def with_http_method(self, method: str) -> "Entry":
        return self.with_field("http_method", method)

    def with_http_response_code(self, code: int) -> "Entry":
        return self.with_field("http_response_code", str(code))

    def with_event(self, event: str) -> "Entry":
        """Parse an ``"<name>,<object_id>[,<subject_id>]"`` event string.

        Ids that do not parse become 0. Strings that do not split into two or
        three parts are bound verbatim under ``event``.
        """
        parts = event.split(",")
        if len(parts) == 2:
            return self.with_string_field_ignore_empty("event_name", parts[0]).with_field(
                "object_id", _parse_int(parts[1])
            )
        if len(parts) == 3:
            return self.with_string_field_ignore_empty("event_name", parts[0]).with_fields(
                object_id=_parse_int(parts[1]),
                subject_id=_parse_int(parts[2]),
            )
        return self.with_string_field_ignore_empty("event", event)

    def with_relation(self, relation: str) -> "Entry":
        return self.with_string_field_ignore_empty("relation", relation)

    def with_channel(self, channel: str) -> "Entry":
        return self.with_field("channel", channel)

    def with_fcm(self) -> "Entry":
        return self.with_channel("fcm")

    def with_notificationlist(self) -> "Entry":
        return self.with_channel("notificationlist")

    def with_nsq_message_id(self, message_id: Union[bytes, str]) -> "Entry":
        if isinstance(message_id, (bytes, bytearray)):
            message_id = message_id.decode("utf-8", errors="replace")
        return self.with_string_field_ignore_empty("nsq_message_id", message_id)

    def with_duration(self, d: Duration) -> "Entry":
        """Bind ``duration_ms``; durations are timedeltas or int nanoseconds."""
        entry = self.with_field("duration_ms", round_to_milliseconds(d))
        if self._logger.raw_durations:
            entry = entry.with_field("nsq_message_process_duration", _nanoseconds(d))
        return entry

    def with_e2e_duration(self, d: Duration) -> "Entry":
        return self.with_field("e2e_duration_ms", round_to_milliseconds(d))

    def with_trace_context(self, ctx: Optional[Context] = None) -> "Entry":
        """Bind Datadog trace/span ids of the span active in ``ctx``, if any."""
        ids = active_span_ids(ctx)
        if ids is None:
            return self
        trace_id, span_id = ids
        return self._extend({"dd.trace_id": trace_id, "dd.span_id": span_id})

    def with_error(self, error: BaseException) -> "Entry":
        """Bind the exception itself; it is rendered only when emitted."""
        return self.with_field(ERROR_KEY, error)

    # =========================================================================
    # Emission
    # =========================================================================

    def debug(self, message: str, *args: Any) -> None:
        self._log(Severity.DEBUG, message, args)

    def info(self, message: str, *args: Any) -> None:
        self._log(Severity.INFO, message, args)

    def warning(self, message: str, *args: Any) -> None:
        self._log(Severity.WARNING, message, args)

    warn = warning

    def error(self, message: str, *args: Any) -> None:
        self._log(Severity.ERROR, message, args)

    def fatal(self, message: str, *args: Any) -> None:
        """Write the record, then exit the process with status 1."""
        self._log(Severity.FATAL, message, args)

    def panic(self, message: str, *args: Any) -> None:
        """Write the record, then raise ``LogPanic``."""
        self._log(Severity.PANIC, message, args)

    def _log(self, severity: Severity, message: str, args: tuple) -> None:
        owner = self._logger
        if not owner.is_enabled_for(severity):
            return
        if args:
            message = _format_message(message, args)

        time_ns = time.time_ns()
        failure = owner.fire_hooks(
            Record(
                severity=severity,
                message=message,
                fields=MappingProxyType(dict(self._context)),
                time_ns=time_ns,
            )
        )

        emitter = self
        if any(slot in self._context for slot in EMITTER_SLOTS):
            emitter = type(self)(owner, self._processors, shelter_emitter_slots(self._context))
        rendered, _ = emitter._process_event(
            severity.method_name,
            None,
            {MESSAGE_SLOT: message, TIME_SLOT: time_ns},
        )
        owner.write(rendered[0])

        if severity == Severity.FATAL:
            owner.exit_func(1)
        elif severity == Severity.PANIC:
            raise LogPanic(message, self._context) from failure
        if failure is not None:
            raise failure
