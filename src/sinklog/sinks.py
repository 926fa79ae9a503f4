"""
Output sinks.

Each sink receives already-formatted text. A sink owns its stream or file
handle exclusively and serializes its own writes. Failures are delivered to
the sink's error channel (`on_error`) and never propagate to the caller of
Logger.log().
"""

import os
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, TextIO

from sinklog.errors import SinkWriteError
from sinklog.routing import SinkConfig, SinkKind


ErrorChannel = Callable[[SinkWriteError], None]


def report_to_stderr(error: SinkWriteError) -> None:
    """Default error channel."""
    try:
        sys.stderr.write(f"[sinklog] {error}\n")
    except (OSError, ValueError):
        pass  # stderr itself is gone


class Sink(ABC):
    """Base sink. Receives formatted records."""

    def __init__(self, config: SinkConfig, on_error: Optional[ErrorChannel] = None):
        self.config = config
        self.on_error = on_error or report_to_stderr

    @property
    def name(self) -> str:
        return self.config.kind.value

    def write(self, text: str) -> None:
        """Emit text, routing any failure to the error channel."""
        try:
            self.emit(text)
        except SinkWriteError as exc:
            self.on_error(exc)
        except Exception as exc:
            self.on_error(SinkWriteError(self.name, f"{type(exc).__name__}: {exc}"))

    @abstractmethod
    def emit(self, text: str) -> None:
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class ConsoleSink(Sink):
    """Writes every record to stdout (or an injected stream)."""

    def __init__(
        self,
        config: SinkConfig,
        on_error: Optional[ErrorChannel] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(config, on_error)
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # resolved per write so redirected/captured stdout is honored
        return self._stream or sys.stdout

    def emit(self, text: str) -> None:
        print(text, file=self.stream, flush=True)

    def flush(self) -> None:
        try:
            self.stream.flush()
        except (OSError, ValueError) as exc:
            self.on_error(SinkWriteError(self.name, str(exc)))


class FileSink(Sink):
    """
    Append-only UTF-8 file.

    The file and its parent directory are created on first write. With a
    size_limit, a write that would grow the file past the limit is refused
    and reported; the file is never rotated or truncated.
    """

    def __init__(self, config: SinkConfig, on_error: Optional[ErrorChannel] = None):
        if not config.path:
            raise ValueError(f"{config.kind.value} sink requires a path")
        super().__init__(config, on_error)
        self.path = Path(config.path)
        self._file: Optional[TextIO] = None
        self._lock = threading.Lock()

    def _ensure_file(self) -> TextIO:
        """Open the file if needed. Must hold self._lock."""
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")
        return self._file

    def emit(self, text: str) -> None:
        line = text + "\n"
        with self._lock:
            fh = self._ensure_file()
            limit = self.config.size_limit
            if limit is not None:
                # on-disk size, so sinks sharing the path share the ceiling
                current = os.fstat(fh.fileno()).st_size
                if current + len(line.encode("utf-8")) > limit:
                    raise SinkWriteError(
                        self.name,
                        f"size limit {limit} bytes reached for {self.path}",
                    )
            fh.write(line)
            fh.flush()

    def flush(self) -> None:
        with self._lock:
            if self._file:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None


def build_sink(config: SinkConfig, on_error: Optional[ErrorChannel] = None) -> Sink:
    """Build the sink implementation for a resolved SinkConfig."""
    if config.kind is SinkKind.CONSOLE:
        return ConsoleSink(config, on_error)
    return FileSink(config, on_error)
