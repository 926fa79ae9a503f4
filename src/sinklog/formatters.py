"""
Record formatter.

One line format for every sink:

    <level><label> [<timestamp>] message: <message> <metadata-json>

  - head (level + label) and message take the level's color
  - the timestamp always uses the rainbow style
  - metadata is pretty-printed JSON on the following lines

Formatting is pure: the same record and options always give the same text.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from sinklog.colors import colorize
from sinklog.levels import DEFAULT_COLORS
from sinklog.records import LogRecord, Scalar, Structured, safe_str

# Record fields never copied into the metadata block
RESERVED_FIELDS = frozenset({"timestamp", "level", "label", "message", "splat"})

TIMESTAMP_STYLE = "rainbow"


@dataclass(frozen=True)
class FormatOptions:
    """Per-sink formatting options."""
    enable_color: bool = True
    label: Optional[str] = None
    fallback_color: Optional[str] = None
    colors: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_COLORS))


def format_record(record: LogRecord, options: FormatOptions) -> str:
    color = options.colors.get(record.level) or options.fallback_color
    paint = options.enable_color

    head = _text(record.level) + _text(record.label)
    if paint:
        head = colorize(head, color)

    timestamp = f" [{_text(record.timestamp)}]" if record.timestamp else ""
    if paint:
        timestamp = colorize(timestamp, TIMESTAMP_STYLE)

    message = _message_segment(record)
    if paint:
        message = colorize(message, color)

    block = ""
    fields = metadata_fields(record)
    if fields:
        block = "\n" + _to_json(fields, indent=2)
        if paint:
            block = colorize(block, color)

    text = head + timestamp + message
    if text and block:
        text += " "
    return text + block


def _text(value: Any) -> str:
    return "" if value is None else safe_str(value)


def _message_segment(record: LogRecord) -> str:
    msg = record.message
    if isinstance(msg, Structured):
        return f" message: {_to_json(msg.value)}"
    if isinstance(msg, Scalar) and msg.text:
        return f" message: {msg.text}"
    return ""


def metadata_fields(record: LogRecord) -> dict[str, Any]:
    """
    Collect the fields rendered in the metadata block.

    A `meta` mapping is flattened one level; a non-mapping `meta` is kept
    as an ordinary field. Reserved names are dropped at both levels.
    """
    out: dict[str, Any] = {}
    for key, value in record.metadata.items():
        if key == "meta" and isinstance(value, Mapping):
            out.update({safe_str(k): v for k, v in value.items()})
        else:
            out[key] = value
    return {k: v for k, v in out.items() if k not in RESERVED_FIELDS}


def _to_json(value: Any, indent: int | None = None) -> str:
    """JSON text for a value; unserializable parts degrade to strings."""
    separators = (",", ":") if indent is None else None
    try:
        return json.dumps(
            value, indent=indent, separators=separators,
            ensure_ascii=False, default=_fallback,
        )
    except Exception:
        # circular or too-deep structures, oversized ints, non-string keys
        if isinstance(value, dict):
            # keep the fields that do serialize
            fields = {safe_str(k): _json_or_str(v) for k, v in value.items()}
            return json.dumps(fields, indent=indent, separators=separators, ensure_ascii=False)
        return json.dumps(safe_str(value), ensure_ascii=False)


def _json_or_str(value: Any) -> Any:
    try:
        json.dumps(value, ensure_ascii=False, default=_fallback)
    except Exception:
        return safe_str(value)
    return value


def _fallback(obj: Any) -> Any:
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if isinstance(obj, BaseException):
        return {"name": type(obj).__name__, "message": safe_str(obj)}
    return safe_str(obj)


FormatFn = Callable[[LogRecord, FormatOptions], str]


class LineFormatter:
    """A format function bound to one sink's options."""

    def __init__(self, options: FormatOptions, fn: FormatFn = format_record):
        self.options = options
        self._fn = fn

    def format(self, record: LogRecord) -> str:
        return self._fn(record, self.options)
