"""
JSON record rendering as a structlog processor chain.

Every record is rendered as a single JSON object with the bound fields, a
``message`` key, a ``level`` key and a ``time`` key in RFC3339 with
nanosecond precision.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson
import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

MESSAGE_KEY = "message"
TIME_KEY = "time"
LEVEL_KEY = "level"
ERROR_KEY = "error"

# Slots the emitting Entry fills in. User fields of the same name are moved
# to ``fields.<key>`` before emission, see ``shelter_emitter_slots``.
MESSAGE_SLOT = "_message"
TIME_SLOT = "_time_ns"
EMITTER_SLOTS = (MESSAGE_SLOT, TIME_SLOT)

_RESERVED_KEYS = (TIME_KEY, MESSAGE_KEY, LEVEL_KEY)

# orjson serializes integers in [-2**63, 2**64) only.
_JSON_INT_MIN = -(1 << 63)
_JSON_INT_MAX = (1 << 64) - 1


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_NON_STR_KEYS).decode()


def format_rfc3339_nano(time_ns: int) -> str:
    """Format epoch nanoseconds as UTC RFC3339, trimming trailing zeros.

    ``1700000000123450000`` becomes ``2023-11-14T22:13:20.12345Z``; whole
    seconds drop the fraction entirely.
    """
    seconds, nanos = divmod(time_ns, 1_000_000_000)
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    if nanos:
        stamp += "." + f"{nanos:09d}".rstrip("0")
    return stamp + "Z"


# =============================================================================
# Structlog Processors
# =============================================================================


def shelter_emitter_slots(context: dict[str, Any]) -> dict[str, Any]:
    """Copy of a bound context with emitter slot names moved to ``fields.<key>``."""
    sheltered = dict(context)
    for key in EMITTER_SLOTS:
        if key in sheltered:
            sheltered[f"fields.{key}"] = sheltered.pop(key)
    return sheltered


def _fit_integers(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return value if _JSON_INT_MIN <= value <= _JSON_INT_MAX else str(value)
    if isinstance(value, dict):
        return {k: _fit_integers(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_fit_integers(v) for v in value]
    return value


def prefix_field_clashes(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Move user fields named like a built-in key to ``fields.<key>``."""
    for key in _RESERVED_KEYS:
        if key in event_dict:
            event_dict[f"fields.{key}"] = event_dict.pop(key)
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add RFC3339 nanosecond timestamp to log event."""
    event_dict[TIME_KEY] = format_rfc3339_nano(event_dict.pop(TIME_SLOT))
    return event_dict


def rename_message_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Publish the emitted message under ``message``."""
    event_dict[MESSAGE_KEY] = event_dict.pop(MESSAGE_SLOT, "")
    return event_dict


def stringify_errors(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render exception values with ``str()``, the way they read in a log line."""
    for key, value in event_dict.items():
        if isinstance(value, BaseException):
            event_dict[key] = str(value)
    return event_dict


def stringify_wide_integers(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render integers orjson cannot encode as decimal strings."""
    for key, value in event_dict.items():
        event_dict[key] = _fit_integers(value)
    return event_dict


def build_processors() -> list[Processor]:
    """The processor chain shared by every Entry of a Logger."""
    return [
        prefix_field_clashes,
        structlog.stdlib.add_log_level,
        add_timestamp,
        rename_message_key,
        stringify_errors,
        stringify_wide_integers,
        structlog.processors.JSONRenderer(serializer=orjson_dumps, default=str),
    ]
