"""
Log records, message variants, and the pre-format pipeline stages.

A record is created fresh by Logger.log() for every call. The only stage
allowed to change it afterwards is the enricher, which fills in label and
timestamp when the caller did not supply them.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional


# ── Message variants ──────────────────────────────────────────────

@dataclass(frozen=True)
class Scalar:
    """A message rendered through its plain string form."""
    text: str


@dataclass(frozen=True)
class Structured:
    """A message rendered as compact JSON."""
    value: Any


Message = Scalar | Structured


def message_of(value: Any) -> Optional[Message]:
    """
    Classify a caller-supplied message once, at intake.

    None → no message. Strings, numbers and bools → Scalar.
    Everything else (mappings, sequences, callables, objects) → Structured.
    """
    if value is None:
        return None
    if isinstance(value, (Scalar, Structured)):
        return value
    if isinstance(value, (str, int, float, bool)):
        return Scalar(_scalar_text(value))
    return Structured(value)


def _scalar_text(value: str | int | float | bool) -> str:
    # JSON-style booleans, matching how structured values render
    if isinstance(value, bool):
        return "true" if value else "false"
    return safe_str(value)


def safe_str(obj: Any) -> str:
    """str(obj), or a placeholder naming the type when str() itself fails."""
    try:
        return str(obj)
    except Exception:
        return f"<unprintable {type(obj).__name__}>"


# ── Record ────────────────────────────────────────────────────────

@dataclass
class LogRecord:
    """
    One log event.

    `metadata` holds every extra field the caller passed; a `meta` mapping
    inside it is flattened by the formatter.
    """
    level: str = ""
    message: Optional[Message] = None
    label: Optional[str] = None
    timestamp: Optional[str] = None
    private: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        level: str,
        message: Any = None,
        *args: Any,
        **metadata: Any,
    ) -> "LogRecord":
        """Build a record from call-site arguments, interpolating `args`."""
        if args and isinstance(message, str):
            message, leftovers = interpolate(message, args)
            for extra in leftovers:
                if isinstance(extra, Mapping):
                    for k, v in extra.items():
                        metadata.setdefault(safe_str(k), v)

        private = bool(metadata.pop("private", False))
        label = metadata.pop("label", None)
        timestamp = metadata.pop("timestamp", None)
        metadata.pop("splat", None)

        return cls(
            level=level,
            message=message_of(message),
            label=label,
            timestamp=timestamp,
            private=private,
            metadata=metadata,
        )


# ── Pipeline stages ───────────────────────────────────────────────

def keep(record: LogRecord) -> bool:
    """Record filter: private records never reach any sink."""
    return record.private is not True


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def enrich(record: LogRecord, label: str | None, now: datetime | None = None) -> LogRecord:
    """Attach label and timestamp where the caller did not set them."""
    changes: dict[str, Any] = {}
    if record.label is None and label is not None:
        changes["label"] = label
    if record.timestamp is None:
        changes["timestamp"] = utc_timestamp(now)
    return replace(record, **changes) if changes else record


# %s, %d, %r, %(name)s-free printf conversions; %% is a literal percent
_PLACEHOLDER = re.compile(r"%[-#0 +]*\d*(?:\.\d+)?[sdifrxXoeEgGc%]")


def interpolate(message: str, args: tuple[Any, ...]) -> tuple[str, list[Any]]:
    """
    Fill printf-style placeholders from `args`.

    Returns the interpolated message and the args no placeholder consumed.
    A conversion error degrades to the raw message with the args appended.
    """
    wanted = sum(1 for m in _PLACEHOLDER.findall(message) if m != "%%")
    used, leftovers = args[:wanted], list(args[wanted:])
    if not used:
        return message, leftovers
    try:
        return message % used, leftovers
    except Exception:
        return " ".join([message, *(safe_str(a) for a in used)]), leftovers
