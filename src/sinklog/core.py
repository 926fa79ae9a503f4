"""
Logger: taxonomy + formatter + active sinks + exception sinks.

Usage:
    log = build_logger({"label": ":grenache:client"})
    log.error("disk full", code="ENOSPC")
    log.info("Found %s at %s", "user", "/login", meta={"user_id": 42})
    log.log("data", {"rows": 12})

Every call builds a fresh record and runs it through
    filter → enricher → formatter → each admitting sink.
The Logger holds no per-call mutable state, so intake may be called from
many threads at once; each sink serializes its own writes.
"""

from __future__ import annotations

import os
import sys
import threading
import traceback
from functools import partial
from types import TracebackType
from typing import Any, Callable, Iterable, Mapping, Optional

from sinklog.config import LoggerConfig
from sinklog.errors import SinkWriteError
from sinklog.formatters import FormatFn, FormatOptions, LineFormatter, format_record
from sinklog.levels import Taxonomy
from sinklog.records import LogRecord, enrich, keep, safe_str, utc_timestamp
from sinklog.routing import SinkKind
from sinklog.sinks import Sink


class Logger:
    """
    One addressable logger.

    Besides log(), every level name of the taxonomy is callable as a
    method: log.error(...), log.warn(...), log.silly(...).
    """

    def __init__(
        self,
        config: LoggerConfig,
        sinks: Mapping[SinkKind, Sink],
        exception_sinks: Iterable[Sink] = (),
        formatter: FormatFn = format_record,
    ) -> None:
        self._config = config
        self._sinks: dict[SinkKind, Sink] = dict(sinks)
        self._exception_sinks: tuple[Sink, ...] = tuple(exception_sinks)
        self._formatters: dict[int, LineFormatter] = {
            id(sink): LineFormatter(self._options_for(sink), formatter)
            for sink in (*self._sinks.values(), *self._exception_sinks)
        }
        self._thresholds: dict[SinkKind, Optional[int]] = {
            kind: self._threshold_for(sink) for kind, sink in self._sinks.items()
        }
        self._warned_levels: set[str] = set()
        self._previous_hooks: Optional[tuple[Callable, Callable]] = None

    # ── Construction helpers ──────────────────────────────────────

    def _options_for(self, sink: Sink) -> FormatOptions:
        return FormatOptions(
            enable_color=sink.config.color_enabled,
            label=sink.config.label,
            fallback_color=sink.config.fallback_color,
            colors=dict(self.taxonomy.colors),
        )

    def _threshold_for(self, sink: Sink) -> Optional[int]:
        """
        Severity threshold of a sink: its own min_level, else the logger-wide
        level, else None (accept everything). A threshold name missing from
        the taxonomy admits only the most severe level.
        """
        name = sink.config.min_level or self._config.level
        if name is None:
            return None
        severity = self.taxonomy.severity(name)
        return severity if severity is not None else 0

    # ── Introspection ─────────────────────────────────────────────

    @property
    def config(self) -> LoggerConfig:
        return self._config

    @property
    def taxonomy(self) -> Taxonomy:
        return self._config.taxonomy

    @property
    def label(self) -> str:
        return self._config.label

    @property
    def sinks(self) -> dict[SinkKind, Sink]:
        return dict(self._sinks)

    @property
    def exception_sinks(self) -> tuple[Sink, ...]:
        return self._exception_sinks

    @property
    def silent(self) -> bool:
        """True when no record sink is active."""
        return not self._sinks

    def status(self) -> dict:
        """Current logger state for display."""
        return {
            "label": self.label,
            "environment": self._config.environment.value,
            "silent": self.silent,
            "levels": dict(self.taxonomy.levels),
            "sinks": {
                kind.value: {
                    "path": sink.config.path,
                    "min_level": sink.config.min_level,
                    "color": sink.config.color_enabled,
                    "size_limit": sink.config.size_limit,
                }
                for kind, sink in self._sinks.items()
            },
            "exception_sinks": [s.config.path for s in self._exception_sinks],
        }

    # ── Intake ────────────────────────────────────────────────────

    def log(self, level: str, message: Any = None, *args: Any, **metadata: Any) -> None:
        """
        Log one record.

        `args` fill printf-style placeholders in a string message. Keyword
        arguments become metadata; `private=True` drops the record, and a
        `meta` mapping is flattened into the metadata block.
        """
        record = LogRecord.create(level, message, *args, **metadata)
        if not keep(record):
            return
        if self.silent:
            return

        severity = self.taxonomy.severity(record.level)
        if severity is None:
            self._warn_unknown_level(record.level)

        # one timestamp for every sink of this call
        record = enrich(record, None)
        for kind, sink in self._sinks.items():
            if self._admits(kind, severity):
                self._write(sink, record)

    def __getattr__(self, name: str) -> Callable[..., None]:
        # only reached for attributes not found normally
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._config.taxonomy.levels:
            return partial(self.log, name)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def _admits(self, kind: SinkKind, severity: Optional[int]) -> bool:
        threshold = self._thresholds[kind]
        if threshold is None:
            return True
        return severity is not None and severity <= threshold

    def _write(self, sink: Sink, record: LogRecord) -> None:
        formatter = self._formatters[id(sink)]
        record = enrich(record, sink.config.label)
        try:
            text = formatter.format(record)
        except Exception as exc:
            # a caller-supplied formatter failed; fall back to the built-in one
            sink.on_error(SinkWriteError(sink.name, f"formatter failed: {type(exc).__name__}"))
            text = format_record(record, formatter.options)
        sink.write(text)

    def _warn_unknown_level(self, level: str) -> None:
        if level in self._warned_levels:
            return
        self._warned_levels.add(level)
        try:
            sys.stderr.write(f"[sinklog] Unknown logger level: {level}\n")
        except (OSError, ValueError):
            pass

    # ── Exceptions ────────────────────────────────────────────────

    def log_exception(self, exc: BaseException) -> None:
        """Route an exception record to the exception sinks, ignoring thresholds."""
        if not self._exception_sinks:
            return
        record = exception_record(exc)
        if not keep(record):
            return
        record = enrich(record, None)
        for sink in self._exception_sinks:
            self._write(sink, record)

    def handle_exceptions(self) -> None:
        """Send uncaught exceptions (main and worker threads) to the exception sinks."""
        if self._previous_hooks is not None:
            return
        self._previous_hooks = (sys.excepthook, threading.excepthook)
        sys.excepthook = self._excepthook
        threading.excepthook = self._thread_excepthook

    def unhandle_exceptions(self) -> None:
        if self._previous_hooks is None:
            return
        sys.excepthook, threading.excepthook = self._previous_hooks
        self._previous_hooks = None

    def _excepthook(
        self,
        exc_type: type[BaseException],
        exc: BaseException,
        tb: Optional[TracebackType],
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        self.log_exception(exc.with_traceback(tb))

    def _thread_excepthook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_value is not None:
            self.log_exception(args.exc_value)

    # ── Cleanup ───────────────────────────────────────────────────

    def flush(self) -> None:
        for sink in (*self._sinks.values(), *self._exception_sinks):
            sink.flush()

    def close(self) -> None:
        """Close all sinks. Call during shutdown."""
        self.unhandle_exceptions()
        for sink in (*self._sinks.values(), *self._exception_sinks):
            sink.close()


def exception_record(exc: BaseException) -> LogRecord:
    """Record describing an uncaught exception."""
    stack = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return LogRecord.create(
        "error",
        f"uncaughtException: {safe_str(exc)}",
        error=exc,
        stack="".join(stack).rstrip("\n").splitlines(),
        exception=True,
        date=utc_timestamp(),
        process={
            "pid": os.getpid(),
            "cwd": os.getcwd(),
            "executable": sys.executable,
            "version": sys.version.split()[0],
            "argv": list(sys.argv),
        },
    )
